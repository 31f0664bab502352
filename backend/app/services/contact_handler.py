"""
Contact form submission handler.

Runs one submission through the full pipeline:

  parse → validate → sanitize → enrich (optional) → notify → respond

The handler is built from an explicit Settings object plus its two
optional collaborators (email sender, AI classifier). Either collaborator
may be absent: without an email sender the submission is logged instead
of emailed, and without a classifier the emails use the plain templates.
Neither collaborator can fail the request.
"""

import logging
import random
import string
import time
from typing import Any, Optional

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.concurrency import run_in_threadpool

from app.config import Settings
from app.models.contact import (
    ContactSuccessResponse,
    EnrichmentResult,
    ErrorResponse,
    MissingFieldsResponse,
    SanitizedSubmission,
    ValidationFailedResponse,
)
from app.services.email_dispatch import (
    EmailSender,
    SendGridEmailSender,
    build_business_email,
    build_customer_email,
    dispatch_emails,
)
from app.services.enrichment import (
    AnthropicClassifier,
    Classifier,
    build_system_prompt,
    enrich_submission,
)
from app.services.sanitizer import sanitize_submission
from app.services.validation import (
    MissingFieldsError,
    SubmissionValidationError,
    validate_submission,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}

SUCCESS_MESSAGE = "Thank you for your inquiry! We will get back to you within 24 hours."
METHOD_NOT_ALLOWED_MESSAGE = "Method not allowed. Use POST."
INTERNAL_ERROR_MESSAGE = (
    "Sorry, there was an error processing your request. "
    "Please try again or call us directly."
)

_SUBMISSION_ID_PREFIX = "SUB_"
_SUBMISSION_ID_ALPHABET = string.ascii_lowercase + string.digits
_SUBMISSION_ID_RANDOM_LENGTH = 9

_JSON_TYPES = ("application/json",)
_FORM_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")


class UnsupportedContentTypeError(Exception):
    """Raised when the request body is neither JSON nor form-encoded."""
    def __init__(self, content_type: str):
        self.content_type = content_type
        self.error_code = "unsupported_content_type"
        self.message = f"Unsupported content type: {content_type or '(none)'}"
        super().__init__(self.message)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def generate_submission_id() -> str:
    """
    Opaque id returned to the client, e.g. ``SUB_1760842800123_k3j9x0a2b``.

    Epoch milliseconds plus 9 random base-36 characters. Not
    cryptographically unique, but collisions are negligible at
    contact-form volume.
    """
    suffix = "".join(random.choices(_SUBMISSION_ID_ALPHABET, k=_SUBMISSION_ID_RANDOM_LENGTH))
    return f"{_SUBMISSION_ID_PREFIX}{int(time.time() * 1000)}_{suffix}"


def json_response(status_code: int, body: BaseModel) -> JSONResponse:
    """JSON response with camelCase field names and the CORS headers."""
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(by_alias=True),
        headers=CORS_HEADERS,
    )


async def parse_submission_body(request: Request) -> dict[str, Any]:
    """
    Decode the request body as a field-name → value mapping.

    Raises:
        UnsupportedContentTypeError: content type is neither JSON nor form data.
        ValueError: the body is malformed or is not a JSON object.
    """
    content_type = request.headers.get("content-type", "")

    if any(t in content_type for t in _JSON_TYPES):
        data = await request.json()
        if not isinstance(data, dict):
            raise ValueError("JSON body must be an object")
        return data

    if any(t in content_type for t in _FORM_TYPES):
        form = await request.form()
        return {key: form[key] for key in form.keys()}

    raise UnsupportedContentTypeError(content_type)


# ---------------------------------------------------------------------------
# Handler
# ---------------------------------------------------------------------------

class ContactHandler:
    """Handles contact form requests for one configured business."""

    def __init__(
        self,
        settings: Settings,
        email_sender: Optional[EmailSender] = None,
        classifier: Optional[Classifier] = None,
    ):
        self.settings = settings
        self.email_sender = email_sender
        self.classifier = classifier

    @classmethod
    def from_settings(cls, settings: Settings) -> "ContactHandler":
        """Wire up the SendGrid sender and Anthropic classifier that settings enable."""
        email_sender = (
            SendGridEmailSender(settings.sendgrid_api_key)
            if settings.email_configured
            else None
        )
        classifier = (
            AnthropicClassifier(
                api_key=settings.anthropic_api_key,
                model=settings.anthropic_model,
                system_prompt=build_system_prompt(settings.business),
            )
            if settings.enrichment_configured
            else None
        )
        return cls(settings, email_sender=email_sender, classifier=classifier)

    async def handle(self, request: Request) -> Response:
        if request.method == "OPTIONS":
            return Response(status_code=200, headers=CORS_HEADERS)

        if request.method != "POST":
            return json_response(
                405,
                ErrorResponse(error="Method not allowed", message=METHOD_NOT_ALLOWED_MESSAGE),
            )

        logger.info("Contact form submission received")

        try:
            data = await parse_submission_body(request)

            try:
                validated = validate_submission(data)
            except MissingFieldsError as exc:
                logger.info("Rejected submission: missing fields %s", exc.missing_fields)
                return json_response(
                    400,
                    MissingFieldsResponse(missing_fields=exc.missing_fields, message=exc.message),
                )
            except SubmissionValidationError as exc:
                logger.info("Rejected submission: %s", exc.message)
                return json_response(
                    400,
                    ValidationFailedResponse(errors=exc.errors, message=exc.message),
                )

            submission = sanitize_submission(validated, request.headers)
            logger.info(
                "Form data validated and sanitized: name=%s email=%s suburb=%s",
                submission.name, submission.email, submission.suburb,
            )

            enrichment = await self.enrich(submission)
            await self.notify(submission, enrichment)

            return json_response(
                200,
                ContactSuccessResponse(
                    message=SUCCESS_MESSAGE,
                    submission_id=generate_submission_id(),
                ),
            )

        except Exception:
            logger.exception("Contact form error")
            return json_response(
                500,
                ErrorResponse(error="Internal server error", message=INTERNAL_ERROR_MESSAGE),
            )

    async def enrich(self, submission: SanitizedSubmission) -> Optional[EnrichmentResult]:
        """Classify the submission if a classifier is configured; None otherwise."""
        if self.classifier is None:
            return None

        outcome = await run_in_threadpool(
            enrich_submission, self.classifier, submission, self.settings.business
        )
        if not outcome.ok:
            logger.warning("AI enrichment unavailable, using plain templates: %s", outcome.error)
            return None

        logger.info(
            "Submission enriched: category=%s urgency=%s",
            outcome.enrichment.category, outcome.enrichment.urgency,
        )
        return outcome.enrichment

    async def notify(
        self,
        submission: SanitizedSubmission,
        enrichment: Optional[EnrichmentResult],
    ) -> None:
        """Email the business and the customer, or log the submission in log-only mode."""
        if self.email_sender is None or not self.settings.email_configured:
            logger.info("SendGrid not configured - logging form submission only")
            logger.info("Contact form submission: %s", submission.model_dump(by_alias=True))
            return

        emails = [
            build_business_email(submission, enrichment, self.settings),
            build_customer_email(submission, enrichment, self.settings),
        ]
        outcomes = await dispatch_emails(self.email_sender, emails)

        failed = [o for o in outcomes if not o.ok]
        for outcome in failed:
            logger.error("SendGrid error: to=%s error=%s", outcome.recipient, outcome.error)
        if not failed:
            logger.info("Emails sent successfully")
