import os
import tempfile

# Configuration is read at import time, so it has to be in place before `app` loads
os.environ.setdefault("DATA_DIR", tempfile.mkdtemp(prefix="booking-forms-"))
os.environ["ADMIN_PASSWORD"] = "test-password"
os.environ.pop("RECAPTCHA_SECRET_KEY", None)
os.environ.pop("SMTP_HOST", None)
os.environ.pop("RESEND_API_KEY", None)
os.environ.pop("REDIS_URL", None)

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from app import rate_limiter  # noqa: E402
from app.domain.submissions.csv_repository import CsvRecordStore  # noqa: E402
from app.domain.submissions.schemas import FormType  # noqa: E402
from app.domain.submissions.stores import reset_stores  # noqa: E402
from app.email_service import get_email_notifier  # noqa: E402
from app.main import app  # noqa: E402
from app.recaptcha import get_recaptcha_verifier  # noqa: E402
from app.shared.exceptions import (  # noqa: E402
    CaptchaFailedError,
    InvalidSubmissionError,
    NotificationError,
)

ADMIN_AUTH = ("admin", "test-password")


class FakeVerifier:
    """Accepts the token "valid", rejects anything else"""

    enabled = True

    def __init__(self):
        self.calls = []

    async def verify(self, token, ip=None):
        self.calls.append((token, ip))
        if not token:
            raise InvalidSubmissionError("reCAPTCHA token is missing")
        if token != "valid":
            raise CaptchaFailedError()


class FakeNotifier:
    transport = "fake"

    def __init__(self, fail=False):
        self.fail = fail
        self.sent = []

    async def send_submission(self, submission):
        if self.fail:
            raise NotificationError()
        self.sent.append(submission)
        return {"success": True, "transport": "fake"}


@pytest.fixture(autouse=True)
def clear_rate_limits():
    rate_limiter.memory_cache.clear()
    yield
    rate_limiter.memory_cache.clear()


@pytest.fixture
def stores(tmp_path):
    return {
        form_type: CsvRecordStore(form_type, tmp_path / f"{form_type.slug}_submissions.csv")
        for form_type in FormType
    }


@pytest.fixture
def verifier():
    return FakeVerifier()


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def client(stores, verifier, notifier):
    reset_stores(stores)
    app.dependency_overrides[get_recaptcha_verifier] = lambda: verifier
    app.dependency_overrides[get_email_notifier] = lambda: notifier
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
    reset_stores()
