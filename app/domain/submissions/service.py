"""Submission service - intake flow for public booking forms"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from ...shared.exceptions import SubmissionFailedError
from .normalizer import normalize_submission
from .schemas import FormType
from .stores import StoreProvider

logger = logging.getLogger(__name__)

HONEYPOT_FIELD = "website"


@dataclass
class SubmissionResult:
    form_type: Optional[FormType]
    record_id: Optional[str] = None
    stored: bool = False
    notified: bool = False
    spam: bool = False


class SubmissionService:
    """
    Runs a submission through the abuse gate, normalizes it, then stores it
    and notifies staff concurrently.

    The request succeeds when at least one of storage and notification
    succeeds; if both fail SubmissionFailedError is raised.
    """

    def __init__(self, store_provider: StoreProvider, verifier, notifier):
        self.store_provider = store_provider
        self.verifier = verifier
        self.notifier = notifier

    async def submit(self, body: Mapping[str, Any], client_ip: Optional[str] = None) -> SubmissionResult:
        # Any non-empty value counts, whitespace included
        if body.get(HONEYPOT_FIELD) not in (None, ""):
            logger.warning(f"🍯 Spam submission detected via honeypot from IP: {client_ip}")
            return SubmissionResult(form_type=None, spam=True)

        await self.verifier.verify(body.get("recaptchaToken"), client_ip)

        submission = normalize_submission(body)
        logger.info(f"📥 Form type detected: {submission.form_type.value}")

        store = self.store_provider(submission.form_type)
        stored, notified = await asyncio.gather(
            asyncio.to_thread(store.append, submission.fields),
            self.notifier.send_submission(submission),
            return_exceptions=True,
        )

        store_failed = isinstance(stored, BaseException)
        notify_failed = isinstance(notified, BaseException)

        if store_failed:
            logger.error(f"❌ Failed to store {submission.form_type.value} submission: {stored!r}")
        if notify_failed:
            logger.error(f"❌ Failed to send {submission.form_type.value} notification: {notified!r}")

        if store_failed and notify_failed:
            raise SubmissionFailedError() from stored

        return SubmissionResult(
            form_type=submission.form_type,
            record_id=None if store_failed else stored,
            stored=not store_failed,
            notified=not notify_failed,
        )
