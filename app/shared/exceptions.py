"""Error taxonomy shared by the intake and admin flows.

Every error carries the HTTP status it maps to and a message that is safe to
show to the caller. Handlers in ``app.main`` turn them into ``{"message": ...}``
responses.
"""

from typing import Optional


class BookingError(Exception):
    """Base class for errors surfaced to API callers"""

    status_code = 500
    message = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class InvalidSubmissionError(BookingError):
    status_code = 400
    message = "Invalid submission"


class CaptchaFailedError(BookingError):
    status_code = 400
    message = "reCAPTCHA verification failed. Please try again."


class RecordNotFoundError(BookingError):
    status_code = 404
    message = "Submission not found"


class UnknownFormTypeError(BookingError):
    status_code = 404
    message = "Unknown form type"


class NotificationError(BookingError):
    status_code = 502
    message = "Notification could not be sent"


class CaptchaUnavailableError(BookingError):
    status_code = 503
    message = "reCAPTCHA verification is temporarily unavailable"


class SubmissionFailedError(BookingError):
    status_code = 500
    message = "Errore durante l'elaborazione della richiesta"
