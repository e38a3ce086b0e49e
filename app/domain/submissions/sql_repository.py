"""SQL-backed submission store - SQLAlchemy over a single submissions table"""

import csv
import io
import logging
from threading import Lock
from typing import Any, Iterator, Mapping, Optional

from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from ...database import Base, create_session_factory
from ...models import Submission
from ...shared.exceptions import RecordNotFoundError
from .repository import (
    apply_update,
    build_row,
    column_keys,
    generate_unique_id,
    query_records,
    utc_timestamp,
)
from .schemas import COLUMNS_BY_FORM_TYPE, ROW_INDEX_KEY, FormType, SubmissionList

logger = logging.getLogger(__name__)


class SqlRecordStore:
    """Record store for one form type, sharing the submissions table with the other"""

    def __init__(self, form_type: FormType, engine: Engine):
        self.form_type = form_type
        self.keys = column_keys(form_type)
        self.engine = engine
        self._session_factory = create_session_factory(engine)
        self._lock = Lock()

    def _rows(self, db: Session) -> list[Submission]:
        return (
            db.query(Submission)
            .filter(Submission.form_type == self.form_type.value)
            .order_by(Submission.row_index)
            .all()
        )

    def _records(self, db: Session) -> list[dict[str, Any]]:
        records = []
        for position, row in enumerate(self._rows(db), start=1):
            records.append(self._to_record(row, position))
        return records

    def _to_record(self, row: Submission, position: int) -> dict[str, Any]:
        stored = row.fields or {}
        record = {key: stored.get(key, "") for key in self.keys}
        record["id"] = row.id
        record["timestamp"] = row.timestamp
        record[ROW_INDEX_KEY] = position
        return record

    def _locate(self, db: Session, record_id: str) -> tuple[Submission, int]:
        for position, row in enumerate(self._rows(db), start=1):
            if row.id == record_id:
                return row, position
        raise RecordNotFoundError()

    def initialize(self) -> None:
        Base.metadata.create_all(bind=self.engine, checkfirst=True)

    def append(self, fields: Mapping[str, Any]) -> str:
        with self._lock, self._session_factory() as db:
            existing_ids = (
                row_id
                for (row_id,) in db.query(Submission.id).filter(
                    Submission.form_type == self.form_type.value
                )
            )
            record_id = generate_unique_id(existing_ids)
            row = build_row(self.form_type, fields, record_id, utc_timestamp())
            db.add(
                Submission(
                    id=record_id,
                    form_type=self.form_type.value,
                    timestamp=row["timestamp"],
                    fields=row,
                )
            )
            db.commit()

        logger.info(f"{self.form_type.value} submission saved with ID: {record_id}")
        return record_id

    def list(
        self,
        search: Optional[str] = None,
        sort_by: str = "timestamp",
        sort_order: str = "desc",
        page: int = 1,
        page_size: int = 10,
    ) -> SubmissionList:
        with self._session_factory() as db:
            records = self._records(db)
        return query_records(records, search, sort_by, sort_order, page, page_size)

    def get(self, record_id: str) -> dict[str, Any]:
        with self._session_factory() as db:
            row, position = self._locate(db, record_id)
            return self._to_record(row, position)

    def update(self, record_id: str, partial: Mapping[str, Any]) -> dict[str, Any]:
        with self._lock, self._session_factory() as db:
            row, position = self._locate(db, record_id)
            updated = apply_update(self.form_type, self._to_record(row, position), partial)
            row.fields = {key: updated[key] for key in self.keys}
            row.timestamp = updated["timestamp"]
            db.commit()

        logger.info(f"{self.form_type.value} submission updated with ID: {record_id}")
        return updated

    def delete(self, record_id: str) -> dict[str, Any]:
        with self._lock, self._session_factory() as db:
            row, position = self._locate(db, record_id)
            removed = self._to_record(row, position)
            db.delete(row)
            db.commit()

        logger.info(f"{self.form_type.value} submission deleted with ID: {record_id}")
        return removed

    def iter_csv(self) -> Iterator[str]:
        with self._session_factory() as db:
            records = self._records(db)

        output = io.StringIO()
        csv.writer(output, lineterminator="\n").writerow(COLUMNS_BY_FORM_TYPE[self.form_type])
        yield output.getvalue()

        for record in records:
            output = io.StringIO()
            writer = csv.writer(output, quoting=csv.QUOTE_ALL, lineterminator="\n")
            writer.writerow([record[key] for key in self.keys])
            yield output.getvalue()

    def describe(self) -> dict[str, Any]:
        return {"backend": "sql", "url": self.engine.url.render_as_string(hide_password=True)}
