"""Shared validation utilities"""

from datetime import date, datetime
from typing import Any, Optional, Union
from zoneinfo import ZoneInfo


def as_text(value: Any) -> str:
    """Coerce a raw form value to stored text. None becomes an empty string."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value).strip()


def parse_appointment_value(
    value: Any, timezone: Optional[str] = None
) -> Optional[Union[date, datetime]]:
    """
    Parse an ISO-8601 date or date-time coming from a booking form.

    Args:
        value: Raw value, e.g. "2024-05-01" or "2024-05-01T10:00:00Z"
        timezone: IANA zone that offset-aware values are converted to

    Returns:
        None for blank input, a date for date-only input, otherwise a datetime

    Raises:
        ValueError: If the value is not a recognizable date or date-time
    """
    text = as_text(value)
    if not text:
        return None

    if len(text) == 10:
        try:
            return date.fromisoformat(text)
        except ValueError:
            pass

    # fromisoformat only understands the "Z" suffix from Python 3.11 on
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"

    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as e:
        raise ValueError(f"Invalid date/time value: {as_text(value)}") from e

    if parsed.tzinfo is not None and timezone:
        parsed = parsed.astimezone(ZoneInfo(timezone))
    return parsed


def format_appointment_date(value: Any, timezone: Optional[str] = None) -> str:
    """Normalize a date or date-time to YYYY-MM-DD ("" when absent)"""
    parsed = parse_appointment_value(value, timezone)
    if parsed is None:
        return ""
    if isinstance(parsed, datetime):
        parsed = parsed.date()
    return parsed.isoformat()


def format_appointment_time(value: Any, timezone: Optional[str] = None) -> str:
    """Normalize a date-time to HH:MM ("" when absent)"""
    text = as_text(value)
    if not text:
        return ""

    # Bare times such as "10:30" are accepted as-is after validation
    if "T" not in text and " " not in text and ":" in text:
        try:
            return datetime.strptime(text[:5], "%H:%M").strftime("%H:%M")
        except ValueError as e:
            raise ValueError(f"Invalid time value: {text}") from e

    parsed = parse_appointment_value(text, timezone)
    if not isinstance(parsed, datetime):
        return ""
    return parsed.strftime("%H:%M")


def display_date(value: str) -> str:
    """Render a stored YYYY-MM-DD date as DD/MM/YYYY for notifications"""
    if not value:
        return ""
    try:
        return date.fromisoformat(value).strftime("%d/%m/%Y")
    except ValueError:
        return value
