import asyncio
from urllib.parse import parse_qs

import httpx
import pytest

from app.recaptcha import RecaptchaVerifier
from app.shared.exceptions import (
    CaptchaFailedError,
    CaptchaUnavailableError,
    InvalidSubmissionError,
)

VERIFY_URL = "https://captcha.test/siteverify"


def make_verifier(handler, secret_key="secret"):
    return RecaptchaVerifier(
        secret_key=secret_key,
        verify_url=VERIFY_URL,
        timeout=1,
        transport=httpx.MockTransport(handler),
    )


def test_successful_verification_posts_form_fields():
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["form"] = parse_qs(request.content.decode())
        return httpx.Response(200, json={"success": True})

    asyncio.run(make_verifier(handler).verify("token-123", ip="10.0.0.1"))

    assert seen["url"] == VERIFY_URL
    assert seen["form"] == {
        "secret": ["secret"],
        "response": ["token-123"],
        "remoteip": ["10.0.0.1"],
    }


def test_rejected_token_raises():
    def handler(request):
        return httpx.Response(200, json={"success": False, "error-codes": ["invalid-input-response"]})

    with pytest.raises(CaptchaFailedError):
        asyncio.run(make_verifier(handler).verify("bad-token"))


@pytest.mark.parametrize("token", [None, "", "   "])
def test_missing_token_raises_without_calling_service(token):
    def handler(request):
        raise AssertionError("verification service should not be called")

    with pytest.raises(InvalidSubmissionError):
        asyncio.run(make_verifier(handler).verify(token))


def test_service_error_status_means_unavailable():
    def handler(request):
        return httpx.Response(500, text="oops")

    with pytest.raises(CaptchaUnavailableError):
        asyncio.run(make_verifier(handler).verify("token"))


def test_network_failure_means_unavailable():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(CaptchaUnavailableError):
        asyncio.run(make_verifier(handler).verify("token"))


def test_non_json_reply_means_unavailable():
    def handler(request):
        return httpx.Response(200, text="<html>")

    with pytest.raises(CaptchaUnavailableError):
        asyncio.run(make_verifier(handler).verify("token"))


def test_without_secret_verification_is_skipped():
    def handler(request):
        raise AssertionError("verification service should not be called")

    verifier = make_verifier(handler, secret_key=None)

    assert not verifier.enabled
    asyncio.run(verifier.verify("anything"))
