# This project was developed with assistance from AI tools.
"""Applicant email delivery over SMTP.

Emails are queued by status transitions and sent only after the
transaction commits. Delivery is best effort: failures are logged and
reported as ``False``, never raised.
"""

import enum
import logging
from dataclasses import dataclass, field
from email.mime.text import MIMEText

import aiosmtplib

from ..core.config import Settings, settings

logger = logging.getLogger(__name__)


class EmailTemplate(str, enum.Enum):
    STATUS = "status"
    RENEWAL = "renewal"
    REVOKE = "revoke"
    TERMINATION = "termination"
    REVERIFICATION = "reverification"


@dataclass(frozen=True)
class OutgoingEmail:
    """An email waiting for its transaction to commit."""

    to: str
    template: EmailTemplate
    variables: dict = field(default_factory=dict)


def render(template: EmailTemplate, variables: dict) -> tuple[str, str]:
    """Return (subject, plain-text body) for a template."""
    name = variables.get("first_name") or "Applicant"
    remarks = variables.get("remarks") or ""
    accepted = variables.get("action") == "Accept"
    greeting = f"Dear {name},\n\n"
    closing = "\n\nSanta Maria Solo Parent Office"

    if template == EmailTemplate.STATUS:
        if accepted:
            return (
                "Solo Parent Application Approved!",
                greeting
                + "Your solo parent application has been approved. "
                "You may now claim your Solo Parent ID at the municipal office." + closing,
            )
        return (
            "Update on Your Solo Parent Application",
            greeting
            + "We have reviewed your solo parent application and could not approve it "
            f"at this time.\n\nRemarks: {remarks}" + closing,
        )

    if template == EmailTemplate.RENEWAL:
        if accepted:
            return (
                "Solo Parent ID Renewal Approved!",
                greeting + "Your Solo Parent ID renewal has been approved." + closing,
            )
        return (
            "Update on Your Solo Parent ID Renewal",
            greeting
            + "Your Solo Parent ID renewal was not approved. Please submit a new "
            f"barangay certificate.\n\nRemarks: {remarks}" + closing,
        )

    if template == EmailTemplate.REVOKE:
        grace_days = variables.get("grace_days", settings.REMARKS_GRACE_DAYS)
        return (
            "Important Notice: Solo Parent ID Status Review",
            greeting
            + "Your Solo Parent ID is under review for the following reason:\n\n"
            f"{remarks}\n\nPlease visit the office within {grace_days} days to settle "
            "these remarks, otherwise your ID will be terminated." + closing,
        )

    if template == EmailTemplate.TERMINATION:
        return (
            "Important Notice: Solo Parent ID Termination",
            greeting
            + "After review, your Solo Parent ID has been terminated and you are no "
            "longer registered as a solo parent." + closing,
        )

    return (
        "Good News: Solo Parent ID Re-verified",
        greeting + "Your Solo Parent ID has been re-verified and is active again." + closing,
    )


class EmailSender:
    """Async SMTP sender."""

    def __init__(self, config: Settings):
        self.config = config

    @property
    def is_configured(self) -> bool:
        return self.config.EMAIL_ENABLED and bool(self.config.SMTP_HOST)

    async def send(self, to: str, template: EmailTemplate, variables: dict) -> bool:
        """Send one templated email. Returns True on success."""
        subject, body = render(template, variables)
        if not self.is_configured:
            logger.info("Email disabled; skipping %s email to %s", template.value, to)
            return False

        message = MIMEText(body, "plain")
        message["From"] = f"{self.config.EMAIL_FROM_NAME} <{self.config.EMAIL_FROM}>"
        message["To"] = to
        message["Subject"] = subject

        try:
            await aiosmtplib.send(
                message,
                hostname=self.config.SMTP_HOST,
                port=self.config.SMTP_PORT,
                username=self.config.SMTP_USERNAME,
                password=self.config.SMTP_PASSWORD,
                start_tls=self.config.SMTP_START_TLS,
                timeout=self.config.SMTP_TIMEOUT,
            )
        except (aiosmtplib.SMTPException, OSError):
            logger.exception("Failed to send %s email to %s", template.value, to)
            return False

        logger.info("Sent %s email to %s", template.value, to)
        return True

    async def send_all(self, messages: list[OutgoingEmail]) -> bool | None:
        """Send queued emails in order. None when nothing was queued."""
        if not messages:
            return None
        results = [await self.send(m.to, m.template, m.variables) for m in messages]
        return all(results)


_sender: EmailSender | None = None


def get_email_sender() -> EmailSender:
    """Return the process-wide sender, creating it on first use."""
    global _sender  # noqa: PLW0603
    if _sender is None:
        _sender = EmailSender(settings)
    return _sender
