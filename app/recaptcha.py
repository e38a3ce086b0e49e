"""
Google reCAPTCHA verification
"""

import logging
from typing import Optional

import httpx

from .config import CAPTCHA_TIMEOUT, RECAPTCHA_SECRET_KEY, RECAPTCHA_VERIFY_URL
from .shared.exceptions import CaptchaFailedError, CaptchaUnavailableError, InvalidSubmissionError

logger = logging.getLogger(__name__)


class RecaptchaVerifier:
    """Checks client tokens against the reCAPTCHA siteverify endpoint"""

    def __init__(
        self,
        secret_key: Optional[str] = RECAPTCHA_SECRET_KEY,
        verify_url: str = RECAPTCHA_VERIFY_URL,
        timeout: float = CAPTCHA_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.secret_key = secret_key
        self.verify_url = verify_url
        self.timeout = timeout
        self._transport = transport

    @property
    def enabled(self) -> bool:
        return bool(self.secret_key)

    async def verify(self, token: Optional[str], ip: Optional[str] = None) -> None:
        """
        Verify a reCAPTCHA token.

        Args:
            token: reCAPTCHA token from client
            ip: Client IP address (optional)

        Raises:
            InvalidSubmissionError: token missing
            CaptchaFailedError: the service rejected the token
            CaptchaUnavailableError: the service could not be reached
        """
        if not token or not token.strip():
            logger.warning(f"❌ reCAPTCHA token missing for IP: {ip}")
            raise InvalidSubmissionError("reCAPTCHA token is missing")

        if not self.enabled:
            logger.warning("⚠️ RECAPTCHA_SECRET_KEY not configured - skipping CAPTCHA verification")
            return

        data = {"secret": self.secret_key, "response": token}
        if ip:
            data["remoteip"] = ip

        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.post(self.verify_url, data=data, timeout=self.timeout)
                response.raise_for_status()
                result = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"❌ reCAPTCHA verification error: {str(e)}")
            raise CaptchaUnavailableError() from e

        if not result.get("success", False):
            error_codes = result.get("error-codes", [])
            logger.warning(f"❌ reCAPTCHA verification failed for IP: {ip} - Errors: {error_codes}")
            raise CaptchaFailedError()

        logger.info(f"✅ reCAPTCHA verification successful for IP: {ip}")


def get_recaptcha_verifier() -> RecaptchaVerifier:
    """Dependency injection for RecaptchaVerifier"""
    return RecaptchaVerifier()
