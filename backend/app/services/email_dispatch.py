"""
Outbound email dispatch (SendGrid).

Builds the business notification and the customer acknowledgment for a
sanitized submission and sends both concurrently. Send failures are
returned as DispatchOutcome values, never raised: a lost email must not
turn a received inquiry into an error for the customer.

Public API:
  SendGridEmailSender(api_key).send(email)
  build_business_email(submission, enrichment, settings) -> OutboundEmail
  build_customer_email(submission, enrichment, settings) -> OutboundEmail
  dispatch_emails(sender, emails) -> list[DispatchOutcome]
"""

import asyncio
import logging
from typing import Optional, Protocol

from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Email, Mail, ReplyTo, To
from starlette.concurrency import run_in_threadpool

from app.config import Settings
from app.models.contact import EnrichmentResult, SanitizedSubmission
from app.models.outbound_email import DispatchOutcome, EmailAddress, OutboundEmail
from app.services import email_templates

logger = logging.getLogger(__name__)


class EmailSender(Protocol):
    def send(self, email: OutboundEmail) -> None: ...


class SendGridEmailSender:
    """Sends OutboundEmail messages through the SendGrid v3 API."""

    def __init__(self, api_key: str):
        self.api_key = api_key

    @staticmethod
    def to_mail(email: OutboundEmail) -> Mail:
        """Map a provider-agnostic OutboundEmail onto a SendGrid Mail."""
        message = Mail(
            from_email=Email(email.sender.email, email.sender.name),
            to_emails=To(email.to.email, email.to.name),
            subject=email.subject,
            plain_text_content=email.text,
            html_content=email.html,
        )
        if email.reply_to is not None:
            message.reply_to = ReplyTo(email.reply_to.email, email.reply_to.name)
        return message

    def send(self, email: OutboundEmail) -> None:
        client = SendGridAPIClient(api_key=self.api_key)
        response = client.send(self.to_mail(email))
        logger.info(
            "Email sent: to=%s status=%s message_id=%s",
            email.to.email, response.status_code,
            response.headers.get("X-Message-Id", ""),
        )


# ---------------------------------------------------------------------------
# Message builders
# ---------------------------------------------------------------------------

def build_business_email(
    submission: SanitizedSubmission,
    enrichment: Optional[EnrichmentResult],
    settings: Settings,
) -> OutboundEmail:
    """Notification to the business inbox; replies go straight to the customer."""
    business = settings.business
    return OutboundEmail(
        to=EmailAddress(email=settings.to_email),
        sender=EmailAddress(email=settings.from_email, name=f"{business.name} Website"),
        reply_to=EmailAddress(email=submission.email, name=submission.name),
        subject=email_templates.business_email_subject(submission, enrichment),
        html=email_templates.business_email_html(submission, enrichment, business),
        text=email_templates.business_email_text(submission, enrichment, business),
    )


def build_customer_email(
    submission: SanitizedSubmission,
    enrichment: Optional[EnrichmentResult],
    settings: Settings,
) -> OutboundEmail:
    business = settings.business
    return OutboundEmail(
        to=EmailAddress(email=submission.email, name=submission.name),
        sender=EmailAddress(email=settings.from_email, name=business.name),
        subject=email_templates.customer_email_subject(business),
        html=email_templates.customer_email_html(submission, enrichment, business),
        text=email_templates.customer_email_text(submission, enrichment, business),
    )


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------

async def _send_one(sender: EmailSender, email: OutboundEmail) -> DispatchOutcome:
    try:
        # SendGrid's SDK is synchronous; keep it off the event loop.
        await run_in_threadpool(sender.send, email)
    except Exception as exc:
        return DispatchOutcome(recipient=email.to.email, status="error", error=str(exc))
    return DispatchOutcome(recipient=email.to.email, status="sent")


async def dispatch_emails(
    sender: EmailSender,
    emails: list[OutboundEmail],
) -> list[DispatchOutcome]:
    """
    Send every email concurrently and wait for all of them.

    Returns one DispatchOutcome per email, in input order. Never raises.
    """
    return list(await asyncio.gather(*(_send_one(sender, email) for email in emails)))
