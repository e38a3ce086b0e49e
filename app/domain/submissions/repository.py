"""Submission repository - storage contract shared by every backend

A store holds the submissions of one form type. Records are plain dicts keyed
by lower-cased column name; listings, lookups and edits behave the same
whichever backend sits behind the ``RecordStore`` protocol.
"""

import math
import secrets
import string
from datetime import datetime, timedelta, timezone
from typing import Any, Iterable, Iterator, Mapping, Optional, Protocol

from .schemas import COLUMNS_BY_FORM_TYPE, ROW_INDEX_KEY, FormType, SubmissionList

ID_ALPHABET = string.ascii_uppercase + string.digits
ID_LENGTH = 8
MAX_ID_ATTEMPTS = 20
TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"


class RecordStore(Protocol):
    form_type: FormType

    def initialize(self) -> None:
        """Create the backing file/table if it does not exist yet"""

    def append(self, fields: Mapping[str, Any]) -> str:
        """Persist a new record and return its generated id"""

    def list(
        self,
        search: Optional[str] = None,
        sort_by: str = "timestamp",
        sort_order: str = "desc",
        page: int = 1,
        page_size: int = 10,
    ) -> SubmissionList:
        """Filter, sort and paginate the stored records"""

    def get(self, record_id: str) -> dict[str, str]:
        """Return one record or raise RecordNotFoundError"""

    def update(self, record_id: str, partial: Mapping[str, Any]) -> dict[str, str]:
        """Overwrite known fields, refresh the timestamp, return the record"""

    def delete(self, record_id: str) -> dict[str, str]:
        """Remove a record and return it"""

    def iter_csv(self) -> Iterator[str]:
        """Yield the store contents as CSV text"""

    def describe(self) -> dict[str, Any]:
        """Backend name and location, used by the health check"""


def column_keys(form_type: FormType) -> list[str]:
    return [column.lower() for column in COLUMNS_BY_FORM_TYPE[form_type]]


def utc_timestamp() -> str:
    """Current instant as ISO-8601 UTC with millisecond precision"""
    now = datetime.now(timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"


def refreshed_timestamp(previous: str) -> str:
    """A fresh timestamp that sorts strictly after ``previous``"""
    current = utc_timestamp()
    if current > previous:
        return current
    try:
        last = datetime.strptime(previous, TIMESTAMP_FORMAT).replace(tzinfo=timezone.utc)
    except ValueError:
        return current
    bumped = last + timedelta(milliseconds=1)
    return bumped.strftime("%Y-%m-%dT%H:%M:%S.") + f"{bumped.microsecond // 1000:03d}Z"


def generate_id() -> str:
    return "".join(secrets.choice(ID_ALPHABET) for _ in range(ID_LENGTH))


def generate_unique_id(existing_ids: Iterable[str]) -> str:
    """Draw random ids until one is not already taken"""
    taken = set(existing_ids)
    for _ in range(MAX_ID_ATTEMPTS):
        candidate = generate_id()
        if candidate not in taken:
            return candidate
    raise RuntimeError("Could not generate a unique submission id")


def build_row(form_type: FormType, fields: Mapping[str, Any], record_id: str, timestamp: str) -> dict[str, str]:
    """Lay out a new record over the form's columns; unknown keys are dropped"""
    lowered = {str(key).lower(): value for key, value in fields.items()}
    row = {}
    for key in column_keys(form_type):
        value = lowered.get(key)
        row[key] = "" if value is None else str(value)
    row["id"] = record_id
    row["timestamp"] = timestamp
    return row


def apply_update(form_type: FormType, row: dict[str, str], partial: Mapping[str, Any]) -> dict[str, str]:
    """
    Overwrite the fields of ``row`` named in ``partial``.

    Keys are matched case-insensitively against the form's columns; unknown
    keys and ``id`` are ignored. The timestamp always moves forward, even
    within the same millisecond as the previous write.
    """
    keys = set(column_keys(form_type))
    updated = dict(row)
    for key, value in partial.items():
        lowered = str(key).lower()
        if lowered in keys and lowered != "id":
            updated[lowered] = "" if value is None else str(value)
    updated["timestamp"] = refreshed_timestamp(row.get("timestamp", ""))
    return updated


def matches_search(record: Mapping[str, Any], search: str) -> bool:
    needle = search.lower()
    return any(
        needle in str(value).lower()
        for key, value in record.items()
        if key != ROW_INDEX_KEY and value
    )


def query_records(
    records: list[dict[str, Any]],
    search: Optional[str] = None,
    sort_by: str = "timestamp",
    sort_order: str = "desc",
    page: int = 1,
    page_size: int = 10,
) -> SubmissionList:
    """Filter, sort and slice records the same way for every backend"""
    if search:
        records = [record for record in records if matches_search(record, search)]

    sort_key = (sort_by or "timestamp").lower()
    descending = (sort_order or "desc").lower() != "asc"
    records = sorted(records, key=lambda r: str(r.get(sort_key) or ""), reverse=descending)

    total = len(records)
    start = (page - 1) * page_size
    return SubmissionList(
        total=total,
        page=page,
        totalPages=math.ceil(total / page_size) if page_size else 0,
        data=records[start : start + page_size],
    )
