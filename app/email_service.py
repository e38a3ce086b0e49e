"""
Booking notification email service using SMTP (primary) or Resend (fallback)
Notifications are rendered from MJML templates
"""

import asyncio
import logging
import smtplib
import ssl
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import parseaddr
from typing import TYPE_CHECKING, Optional, Union

import resend
from mjml import mjml_to_html

from .config import (
    EMAIL_FROM_ADDRESS,
    EMAIL_PASS,
    EMAIL_USER,
    NOTIFY_EMAIL_TO,
    RESEND_API_KEY,
    SMTP_HOST,
    SMTP_PORT,
    SMTP_TIMEOUT,
    SMTP_USE_TLS,
)
from .email_templates import booking_notification_template
from .shared.exceptions import NotificationError
from .shared.validators import display_date

if TYPE_CHECKING:
    from .domain.submissions.normalizer import NormalizedSubmission

logger = logging.getLogger(__name__)


def compile_mjml_to_html(mjml_content: str) -> str:
    """Compile MJML template to production-ready HTML"""
    result = mjml_to_html(mjml_content)
    # mjml_to_html returns a dict with 'html' and 'errors' keys
    if isinstance(result, dict):
        if result.get("errors"):
            logger.warning(f"MJML compilation warnings: {result['errors']}")
        return result.get("html", "")
    return str(result)


class SmtpSettings:
    def __init__(
        self,
        host: Optional[str] = SMTP_HOST,
        port: int = SMTP_PORT,
        username: Optional[str] = EMAIL_USER,
        password: Optional[str] = EMAIL_PASS,
        use_tls: bool = SMTP_USE_TLS,
        timeout: float = SMTP_TIMEOUT,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.timeout = timeout

    @property
    def configured(self) -> bool:
        return bool(self.host and self.username and self.password)


def send_via_smtp(
    settings: SmtpSettings,
    to: Union[str, list[str]],
    subject: str,
    html_content: str,
    from_address: str,
) -> dict:
    """Send an HTML email through the configured SMTP server"""
    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = from_address
    msg["To"] = to if isinstance(to, str) else ", ".join(to)
    msg.attach(MIMEText(html_content, "html", "utf-8"))

    recipients = [to] if isinstance(to, str) else to

    implicit_tls = settings.port == 465
    if implicit_tls:
        context = ssl.create_default_context()
        server = smtplib.SMTP_SSL(settings.host, settings.port, context=context, timeout=settings.timeout)
    else:
        server = smtplib.SMTP(settings.host, settings.port, timeout=settings.timeout)

    try:
        if not implicit_tls and settings.use_tls:
            server.starttls(context=ssl.create_default_context())
        server.login(settings.username, settings.password)
        server.sendmail(parseaddr(from_address)[1], recipients, msg.as_string())
    finally:
        server.quit()

    logger.info(f"✅ SMTP email sent successfully via {settings.host}")
    return {"success": True, "transport": "smtp"}


def send_via_resend(to: Union[str, list[str]], subject: str, html_content: str, from_address: str) -> dict:
    recipients = [to] if isinstance(to, str) else to
    response = resend.Emails.send(
        {"from": from_address, "to": recipients, "subject": subject, "html": html_content}
    )
    logger.info(f"✅ Email sent successfully via Resend: {response}")
    return {"success": True, "transport": "resend"}


class EmailNotifier:
    """Sends the staff notification for accepted submissions"""

    def __init__(
        self,
        smtp: Optional[SmtpSettings] = None,
        resend_api_key: Optional[str] = RESEND_API_KEY,
        recipient: str = NOTIFY_EMAIL_TO,
    ):
        self.smtp = smtp or SmtpSettings()
        self.resend_api_key = resend_api_key
        self.recipient = recipient

    @property
    def transport(self) -> str:
        if self.smtp.configured:
            return "smtp"
        if self.resend_api_key:
            return "resend"
        return "not configured"

    @property
    def from_address(self) -> str:
        if self.smtp.configured:
            return f'"Website Form" <{self.smtp.username}>'
        return EMAIL_FROM_ADDRESS

    def render(self, submission: "NormalizedSubmission") -> tuple[str, str]:
        """Return (subject, html) for a submission"""
        subject = f"Nuova Prenotazione - {submission.form_type.value}"
        mjml_content = booking_notification_template(
            submission.form_type.value,
            submission.display_name,
            submission.fields,
            display_date=display_date(submission.fields.get("appointmentdate", "")),
        )
        return subject, compile_mjml_to_html(mjml_content)

    def _send(self, subject: str, html_content: str) -> dict:
        transport = self.transport
        try:
            if transport == "smtp":
                logger.info(f"📧 Sending notification via SMTP: {self.smtp.host}")
                return send_via_smtp(self.smtp, self.recipient, subject, html_content, self.from_address)
            if transport == "resend":
                logger.info(f"📧 Sending notification via Resend to: {self.recipient}")
                resend.api_key = self.resend_api_key
                return send_via_resend(self.recipient, subject, html_content, self.from_address)
        except Exception as e:
            logger.error(f"❌ Email send error to {self.recipient}: {e}")
            raise NotificationError() from e

        logger.error("❌ No email service configured - SMTP settings and RESEND_API_KEY missing")
        raise NotificationError("Email service not configured")

    async def send_submission(self, submission: "NormalizedSubmission") -> dict:
        """Render and send the notification; blocking transports run in a worker thread"""
        subject, html_content = self.render(submission)
        return await asyncio.to_thread(self._send, subject, html_content)


def get_email_notifier() -> EmailNotifier:
    """Dependency injection for EmailNotifier"""
    return EmailNotifier()
