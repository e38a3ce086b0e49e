"""Form normalizer - maps dental and checkup form bodies onto store records"""

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping

from ...config import CLINIC_TIMEZONE
from ...shared.exceptions import InvalidSubmissionError
from ...shared.validators import as_text, format_appointment_date, format_appointment_time
from .schemas import FormType

logger = logging.getLogger(__name__)


@dataclass
class NormalizedSubmission:
    """A submission ready to be appended, keyed by lower-cased column name"""

    form_type: FormType
    fields: dict[str, str] = field(default_factory=dict)

    @property
    def display_name(self) -> str:
        return self.fields.get("name") or self.fields.get("fullname", "")


def detect_form_type(raw: Mapping[str, Any]) -> FormType:
    """
    Decide which form a body came from.

    An explicit ``formType`` of "dental" or "checkup" wins. Without one, a
    non-empty first or last name means the checkup form; anything else is
    treated as the dental form.
    """
    explicit = FormType.from_slug(as_text(raw.get("formType")))
    if explicit is not None:
        return explicit

    if as_text(raw.get("firstName")) or as_text(raw.get("lastName")):
        return FormType.CHECKUP
    return FormType.DENTAL


def _appointment(raw: Mapping[str, Any], date_key: str, time_key: str) -> dict[str, str]:
    try:
        return {
            "appointmentdate": format_appointment_date(raw.get(date_key), CLINIC_TIMEZONE),
            "appointmenttime": format_appointment_time(raw.get(time_key), CLINIC_TIMEZONE),
        }
    except ValueError as e:
        logger.warning(f"⚠️ Rejected submission with bad appointment value: {e}")
        raise InvalidSubmissionError(str(e)) from e


def normalize_submission(raw: Mapping[str, Any]) -> NormalizedSubmission:
    """Build the canonical record for a raw form body"""
    form_type = detect_form_type(raw)

    if form_type is FormType.DENTAL:
        fields = {
            "name": as_text(raw.get("name")),
            "email": as_text(raw.get("email")),
            "phone": as_text(raw.get("phone")),
            "department": as_text(raw.get("department")),
            "treatment": as_text(raw.get("treatment")),
            "service": as_text(raw.get("service")),
        }
        fields.update(_appointment(raw, "date", "time"))
    else:
        first_name = as_text(raw.get("firstName"))
        last_name = as_text(raw.get("lastName"))
        fields = {
            "fullname": f"{first_name} {last_name}".strip(),
            "firstname": first_name,
            "lastname": last_name,
            "email": as_text(raw.get("email")),
            "mobile": as_text(raw.get("mobile")),
            "phone": as_text(raw.get("phone")),
            "age": as_text(raw.get("age")),
            "address": as_text(raw.get("address")),
            "branch": as_text(raw.get("branch")),
            "service": as_text(raw.get("service")),
            "message": as_text(raw.get("message")),
        }
        fields.update(_appointment(raw, "selectedDate", "selectedTime"))

    return NormalizedSubmission(form_type=form_type, fields=fields)
