from app.domain.submissions.schemas import FormType

SUCCESS = {"message": "Email inviata con successo!"}


def test_checkup_submission_scenario(client, stores, notifier):
    response = client.post(
        "/send-email",
        json={
            "firstName": "Ana",
            "lastName": "Doda",
            "email": "a@x.com",
            "selectedDate": "2024-05-01",
            "selectedTime": "2024-05-01T10:00:00",
            "recaptchaToken": "valid",
        },
    )

    assert response.status_code == 200
    assert response.json() == SUCCESS

    listing = stores[FormType.CHECKUP].list()
    assert listing.total == 1
    record = listing.data[0]
    assert record["fullname"] == "Ana Doda"
    assert record["appointmentdate"] == "2024-05-01"
    assert record["appointmenttime"] == "10:00"
    assert len(notifier.sent) == 1


def test_dental_submission_scenario(client, stores):
    response = client.post(
        "/send-email",
        json={
            "name": "Ben Kola",
            "department": "Dental",
            "date": "2024-05-01",
            "time": "2024-05-01T11:00:00",
            "recaptchaToken": "valid",
        },
    )

    assert response.status_code == 200
    record = stores[FormType.DENTAL].list().data[0]
    assert record["name"] == "Ben Kola"
    assert record["department"] == "Dental"
    assert stores[FormType.CHECKUP].list().total == 0


def test_numeric_fields_are_stored_as_text(client, stores):
    response = client.post(
        "/send-email",
        json={"firstName": "Ana", "age": 35, "recaptchaToken": "valid"},
    )
    assert response.status_code == 200
    assert stores[FormType.CHECKUP].list().data[0]["age"] == "35"


def test_honeypot_gets_identical_response(client, stores, notifier, verifier):
    genuine = client.post("/send-email", json={"name": "Ben", "recaptchaToken": "valid"})
    bot = client.post(
        "/send-email",
        json={"name": "Bot", "website": "http://spam.example", "recaptchaToken": "whatever"},
    )

    assert bot.status_code == genuine.status_code == 200
    assert bot.json() == genuine.json()
    assert stores[FormType.DENTAL].list().total == 1
    assert len(notifier.sent) == 1
    assert len(verifier.calls) == 1


def test_whitespace_honeypot_is_still_a_bot(client, stores, notifier, verifier):
    response = client.post(
        "/send-email", json={"name": "Bot", "website": "   ", "recaptchaToken": "valid"}
    )

    assert response.status_code == 200
    assert response.json() == SUCCESS
    assert stores[FormType.DENTAL].list().total == 0
    assert notifier.sent == []
    assert verifier.calls == []


def test_missing_captcha_token_is_400(client, stores):
    response = client.post("/send-email", json={"name": "Ben"})

    assert response.status_code == 400
    assert response.json() == {"message": "reCAPTCHA token is missing"}
    assert stores[FormType.DENTAL].list().total == 0


def test_failed_captcha_is_400(client, stores, notifier):
    response = client.post("/send-email", json={"name": "Ben", "recaptchaToken": "forged"})

    assert response.status_code == 400
    assert response.json() == {"message": "reCAPTCHA verification failed. Please try again."}
    assert notifier.sent == []


def test_bad_appointment_date_is_400(client, stores):
    response = client.post(
        "/send-email", json={"name": "Ben", "date": "someday", "recaptchaToken": "valid"}
    )
    assert response.status_code == 400
    assert stores[FormType.DENTAL].list().total == 0


def test_malformed_body_is_400(client):
    response = client.post("/send-email", json=["not", "an", "object"])
    assert response.status_code == 400
    assert response.json()["message"] == "Invalid request"


def test_submissions_are_rate_limited_per_ip(client, stores):
    from app import rate_limiter
    from app.main import app

    limiter = rate_limiter.create_rate_limiter(limit=2, window_seconds=60, key_prefix="test")
    app.dependency_overrides[rate_limiter.submission_rate_limit] = limiter

    body = {"name": "Ben", "recaptchaToken": "valid"}
    assert client.post("/send-email", json=body).status_code == 200
    assert client.post("/send-email", json=body).status_code == 200

    blocked = client.post("/send-email", json=body)

    assert blocked.status_code == 429
    assert int(blocked.headers["Retry-After"]) > 0
    assert stores[FormType.DENTAL].list().total == 2


def test_health_reports_configuration(client):
    response = client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["captcha"] == "disabled"
    assert data["emailTransport"] == "not configured"
    assert data["storage"]["dental"]["backend"] == "csv"
    assert data["storage"]["checkup"]["path"].endswith("checkup_submissions.csv")


def test_storage_and_mail_both_failing_is_generic_500(client):
    from app.domain.submissions.stores import get_store_provider
    from app.email_service import get_email_notifier
    from app.main import app

    from .conftest import FakeNotifier

    class BrokenStore:
        def append(self, fields):
            raise OSError("disk full at /srv/data")

    app.dependency_overrides[get_store_provider] = lambda: (lambda form_type: BrokenStore())
    app.dependency_overrides[get_email_notifier] = lambda: FakeNotifier(fail=True)

    response = client.post("/send-email", json={"name": "Ben", "recaptchaToken": "valid"})

    assert response.status_code == 500
    assert response.json() == {"message": "Errore durante l'elaborazione della richiesta"}
    assert "disk full" not in response.text
