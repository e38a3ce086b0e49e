"""Submission router - public endpoint for booking form submissions"""

import logging

from fastapi import APIRouter, Depends, Request

from ...config import SUCCESS_MESSAGE
from ...email_service import EmailNotifier, get_email_notifier
from ...rate_limiter import get_client_ip, submission_rate_limit
from ...recaptcha import RecaptchaVerifier, get_recaptcha_verifier
from .schemas import SubmissionAccepted, SubmissionRequest
from .service import SubmissionService
from .stores import StoreProvider, get_store_provider

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Submissions"])


def get_submission_service(
    store_provider: StoreProvider = Depends(get_store_provider),
    verifier: RecaptchaVerifier = Depends(get_recaptcha_verifier),
    notifier: EmailNotifier = Depends(get_email_notifier),
) -> SubmissionService:
    """Dependency injection for SubmissionService"""
    return SubmissionService(store_provider, verifier, notifier)


@router.post("/send-email", response_model=SubmissionAccepted)
async def send_email(
    data: SubmissionRequest,
    request: Request,
    _: None = Depends(submission_rate_limit),
    service: SubmissionService = Depends(get_submission_service),
):
    """Accept a dental or checkup booking; bots caught by the honeypot get the same reply"""
    result = await service.submit(data.model_dump(), client_ip=get_client_ip(request))
    if not result.spam:
        logger.info(
            f"✅ {result.form_type.value} submission processed "
            f"(id={result.record_id}, stored={result.stored}, notified={result.notified})"
        )
    return SubmissionAccepted(message=SUCCESS_MESSAGE)
