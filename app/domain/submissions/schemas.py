"""Submission domain schemas - form types, column layouts and Pydantic models"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class FormType(str, Enum):
    DENTAL = "DENTAL"
    CHECKUP = "CHECKUP"

    @property
    def slug(self) -> str:
        """Lower-case name used in URLs and file names"""
        return self.value.lower()

    @classmethod
    def from_slug(cls, value: Optional[str]) -> Optional["FormType"]:
        if not value:
            return None
        try:
            return cls(value.strip().upper())
        except ValueError:
            return None


# Column order of each store. Records are keyed by the lower-cased names.
DENTAL_COLUMNS = [
    "ID",
    "Timestamp",
    "Name",
    "Email",
    "Phone",
    "Department",
    "Treatment",
    "Service",
    "AppointmentDate",
    "AppointmentTime",
]

CHECKUP_COLUMNS = [
    "ID",
    "Timestamp",
    "FullName",
    "FirstName",
    "LastName",
    "Email",
    "Mobile",
    "Phone",
    "Age",
    "Address",
    "Branch",
    "Service",
    "AppointmentDate",
    "AppointmentTime",
    "Message",
]

COLUMNS_BY_FORM_TYPE = {
    FormType.DENTAL: DENTAL_COLUMNS,
    FormType.CHECKUP: CHECKUP_COLUMNS,
}

ROW_INDEX_KEY = "_rowIndex"


class SubmissionRequest(BaseModel):
    """Body of a public booking form submission (dental or checkup shape)"""

    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    formType: Optional[str] = None

    # Shared
    email: Optional[str] = None
    service: Optional[str] = None
    phone: Optional[str] = None

    # Dental form
    name: Optional[str] = None
    department: Optional[str] = None
    treatment: Optional[str] = None
    date: Optional[str] = None
    time: Optional[str] = None

    # Checkup form
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    mobile: Optional[str] = None
    age: Optional[str] = None
    address: Optional[str] = None
    branch: Optional[str] = None
    message: Optional[str] = None
    selectedDate: Optional[str] = None
    selectedTime: Optional[str] = None

    # Abuse gate
    recaptchaToken: Optional[str] = None
    website: Optional[str] = ""


class SubmissionAccepted(BaseModel):
    message: str


class SubmissionList(BaseModel):
    """One page of a filtered and sorted submission listing"""

    total: int
    page: int
    totalPages: int
    data: list[dict[str, Any]] = Field(default_factory=list)


class SubmissionMutation(BaseModel):
    message: str
    data: dict[str, Any]
