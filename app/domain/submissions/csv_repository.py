"""CSV-backed submission store - one flat file per form type"""

import csv
import logging
import os
import shutil
import tempfile
from pathlib import Path
from threading import Lock
from typing import Any, Iterator, Mapping, Optional

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

LINE_TERMINATOR = "\n"
EXPORT_CHUNK_SIZE = 64 * 1024


class CsvRecordStore:
    """
    Flat-file record store.

    The first line of the file is the column header; every following record
    is one fully-quoted CSV row. Appends go straight to the end of the file,
    updates and deletes rewrite it through a temporary file. A lock serializes
    access from threads of this process; separate processes sharing the file
    are not coordinated.
    """

    def __init__(self, form_type: FormType, path: Path):
        self.form_type = form_type
        self.path = Path(path)
        self.headers = COLUMNS_BY_FORM_TYPE[form_type]
        self.keys = column_keys(form_type)
        self._lock = Lock()

    # ------------------------------------------------------------------
    # File helpers (callers hold the lock)
    # ------------------------------------------------------------------

    def _ensure_file(self) -> None:
        if self.path.exists():
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8", newline="") as f:
            csv.writer(f, lineterminator=LINE_TERMINATOR).writerow(self.headers)
        logger.info(f"Created {self.form_type.slug} submissions CSV file at {self.path}")

    def _read_records(self) -> list[dict[str, str]]:
        if not self.path.exists():
            return []

        with open(self.path, "r", encoding="utf-8", newline="") as f:
            rows = list(csv.reader(f))

        if not rows:
            return []

        file_keys = [header.strip().lower() for header in rows[0]]
        expected = len(file_keys)
        records = []

        for line_number, values in enumerate(rows[1:], start=2):
            if not values:
                continue
            if len(values) < expected:
                logger.warning(
                    f"⚠️ {self.path.name} line {line_number}: {len(values)} fields, "
                    f"padded to {expected}"
                )
                values = values + [""] * (expected - len(values))
            elif len(values) > expected:
                logger.warning(
                    f"⚠️ {self.path.name} line {line_number}: {len(values)} fields, "
                    f"extra fields dropped"
                )

            by_header = dict(zip(file_keys, values))
            record = {key: by_header.get(key, "") for key in self.keys}
            record[ROW_INDEX_KEY] = len(records) + 1
            records.append(record)

        return records

    def _write_records(self, records: list[dict[str, Any]]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.")
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
                csv.writer(f, lineterminator=LINE_TERMINATOR).writerow(self.headers)
                writer = csv.writer(f, quoting=csv.QUOTE_ALL, lineterminator=LINE_TERMINATOR)
                for record in records:
                    writer.writerow([record.get(key, "") for key in self.keys])
            if self.path.exists():
                shutil.copymode(self.path, tmp_name)
            os.replace(tmp_name, self.path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    def _find(self, records: list[dict[str, Any]], record_id: str) -> int:
        for index, record in enumerate(records):
            if record.get("id") == record_id:
                return index
        raise RecordNotFoundError()

    # ------------------------------------------------------------------
    # RecordStore operations
    # ------------------------------------------------------------------

    def initialize(self) -> None:
        with self._lock:
            self._ensure_file()

    def append(self, fields: Mapping[str, Any]) -> str:
        with self._lock:
            self._ensure_file()
            existing_ids = (record["id"] for record in self._read_records())
            record_id = generate_unique_id(existing_ids)
            row = build_row(self.form_type, fields, record_id, utc_timestamp())

            with open(self.path, "a", encoding="utf-8", newline="") as f:
                writer = csv.writer(f, quoting=csv.QUOTE_ALL, lineterminator=LINE_TERMINATOR)
                writer.writerow([row[key] for key in self.keys])

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
        with self._lock:
            records = self._read_records()
        return query_records(records, search, sort_by, sort_order, page, page_size)

    def get(self, record_id: str) -> dict[str, Any]:
        with self._lock:
            records = self._read_records()
        return records[self._find(records, record_id)]

    def update(self, record_id: str, partial: Mapping[str, Any]) -> dict[str, Any]:
        with self._lock:
            records = self._read_records()
            index = self._find(records, record_id)
            records[index] = apply_update(self.form_type, records[index], partial)
            self._write_records(records)

        logger.info(f"{self.form_type.value} submission updated with ID: {record_id}")
        return records[index]

    def delete(self, record_id: str) -> dict[str, Any]:
        with self._lock:
            records = self._read_records()
            removed = records.pop(self._find(records, record_id))
            self._write_records(records)

        logger.info(f"{self.form_type.value} submission deleted with ID: {record_id}")
        return removed

    def iter_csv(self) -> Iterator[str]:
        with self._lock:
            self._ensure_file()
            with open(self.path, "r", encoding="utf-8", newline="") as f:
                content = f.read()
        for start in range(0, len(content), EXPORT_CHUNK_SIZE):
            yield content[start : start + EXPORT_CHUNK_SIZE]

    def describe(self) -> dict[str, Any]:
        return {"backend": "csv", "path": str(self.path)}
