import pytest

from app.domain.submissions.normalizer import detect_form_type, normalize_submission
from app.domain.submissions.schemas import FormType
from app.shared.exceptions import InvalidSubmissionError
from app.shared.validators import format_appointment_date, format_appointment_time


def test_first_or_last_name_means_checkup():
    assert detect_form_type({"firstName": "Ana"}) is FormType.CHECKUP
    assert detect_form_type({"lastName": "Doda"}) is FormType.CHECKUP
    assert detect_form_type({"name": "Ben Kola", "firstName": "  "}) is FormType.DENTAL
    assert detect_form_type({}) is FormType.DENTAL


def test_explicit_form_type_wins_over_heuristic():
    assert detect_form_type({"formType": "dental", "firstName": "Ana"}) is FormType.DENTAL
    assert detect_form_type({"formType": "CHECKUP"}) is FormType.CHECKUP
    # Unknown discriminator values fall back to the heuristic
    assert detect_form_type({"formType": "other", "lastName": "Doda"}) is FormType.CHECKUP


def test_checkup_submission_derives_full_name():
    submission = normalize_submission(
        {
            "firstName": "Ana",
            "lastName": "Doda",
            "email": "a@x.com",
            "age": 35,
            "selectedDate": "2024-05-01",
            "selectedTime": "2024-05-01T10:00:00",
        }
    )
    assert submission.form_type is FormType.CHECKUP
    assert submission.fields["fullname"] == "Ana Doda"
    assert submission.fields["age"] == "35"
    assert submission.fields["appointmentdate"] == "2024-05-01"
    assert submission.fields["appointmenttime"] == "10:00"
    assert submission.fields["message"] == ""


def test_full_name_is_trimmed_when_a_part_is_missing():
    submission = normalize_submission({"lastName": "Doda"})
    assert submission.fields["fullname"] == "Doda"
    assert submission.fields["firstname"] == ""


def test_dental_submission_maps_date_and_time():
    submission = normalize_submission(
        {
            "name": "Ben Kola",
            "department": "Dental",
            "date": "2024-05-01",
            "time": "2024-05-01T11:00:00",
        }
    )
    assert submission.form_type is FormType.DENTAL
    assert submission.fields["name"] == "Ben Kola"
    assert submission.fields["department"] == "Dental"
    assert submission.fields["appointmentdate"] == "2024-05-01"
    assert submission.fields["appointmenttime"] == "11:00"
    assert submission.display_name == "Ben Kola"


def test_missing_optional_fields_are_empty_strings():
    submission = normalize_submission({"name": "Ben"})
    assert set(submission.fields.values()) == {"", "Ben"}


def test_unparseable_date_is_rejected():
    with pytest.raises(InvalidSubmissionError):
        normalize_submission({"name": "Ben", "date": "next tuesday"})


def test_offset_aware_values_are_converted_to_clinic_timezone():
    # Europe/Tirane is UTC+2 in May
    assert format_appointment_time("2024-05-01T08:30:00Z", "Europe/Tirane") == "10:30"
    assert format_appointment_date("2024-05-01T23:30:00Z", "Europe/Tirane") == "2024-05-02"


def test_bare_times_are_accepted():
    assert format_appointment_time("9:05") == "09:05"
    assert format_appointment_time("14:30") == "14:30"
    assert format_appointment_time(None) == ""
