"""Store selection - one RecordStore per form type, picked by STORAGE_BACKEND"""

import logging
from threading import Lock
from typing import Callable, Optional

from ...config import DATA_DIR, DATABASE_URL, STORAGE_BACKEND
from .csv_repository import CsvRecordStore
from .repository import RecordStore
from .schemas import FormType

logger = logging.getLogger(__name__)

StoreProvider = Callable[[FormType], RecordStore]

_stores: dict[FormType, RecordStore] = {}
_stores_lock = Lock()


def build_stores(backend: str = STORAGE_BACKEND) -> dict[FormType, RecordStore]:
    """Create the stores for every form type with the configured backend"""
    if backend == "csv":
        return {
            form_type: CsvRecordStore(form_type, DATA_DIR / f"{form_type.slug}_submissions.csv")
            for form_type in FormType
        }

    if backend == "sql":
        from ...database import create_db_engine
        from .sql_repository import SqlRecordStore

        if DATABASE_URL.startswith("sqlite"):
            DATA_DIR.mkdir(parents=True, exist_ok=True)
        engine = create_db_engine(DATABASE_URL)
        return {form_type: SqlRecordStore(form_type, engine) for form_type in FormType}

    raise ValueError(f"Unknown STORAGE_BACKEND: {backend!r} (expected 'csv' or 'sql')")


def get_store(form_type: FormType) -> RecordStore:
    """Return the process-wide store for a form type, creating stores on first use"""
    with _stores_lock:
        if not _stores:
            _stores.update(build_stores())
            logger.info(f"📦 Submission storage backend: {STORAGE_BACKEND}")
        return _stores[form_type]


def initialize_stores() -> None:
    """Create header-only files or tables so the stores exist from the first run"""
    for form_type in FormType:
        get_store(form_type).initialize()


def get_store_provider() -> StoreProvider:
    """Dependency injection for the store lookup"""
    return get_store


def reset_stores(stores: Optional[dict[FormType, RecordStore]] = None) -> None:
    with _stores_lock:
        _stores.clear()
        if stores:
            _stores.update(stores)
