"""
Pydantic models for the contact form pipeline.

Models:
  ValidatedSubmission       — submission that passed presence + format checks
  SanitizedSubmission       — validated submission after sanitizing, plus metadata
  EnrichmentResult          — optional AI classification of the inquiry
  ContactSuccessResponse    — 200 response body
  MissingFieldsResponse     — 400 response body (required fields absent)
  ValidationFailedResponse  — 400 response body (format rules failed)
  ErrorResponse             — 405 / 500 response body
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_SERVICE = "General Inquiry"
DEFAULT_PREFERRED_CONTACT = "Email"


# ---------------------------------------------------------------------------
# Submission stages
# ---------------------------------------------------------------------------

class ValidatedSubmission(BaseModel):
    """
    A contact form submission that passed validation.

    Values are the raw (untrimmed) strings the client sent; trimming and
    script stripping happen in the sanitizer. preferred_contact is
    serialised as ``preferredContact`` to match the form field name.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    email: str
    phone: str
    suburb: str
    message: str
    service: str = DEFAULT_SERVICE
    preferred_contact: str = Field(DEFAULT_PREFERRED_CONTACT, alias="preferredContact")


class SanitizedSubmission(ValidatedSubmission):
    """ValidatedSubmission with sanitized fields and request metadata."""

    submitted_at: str = Field(alias="submittedAt")
    user_agent: str = Field("Unknown", alias="userAgent")
    ip: str = "Unknown"


# ---------------------------------------------------------------------------
# AI enrichment
# ---------------------------------------------------------------------------

class EnrichmentResult(BaseModel):
    """
    Structured classification of an inquiry produced by the AI classifier.

    Only category and urgency are required; the model is told to fill in
    everything, but a partial answer is still useful for triage.
    """

    model_config = {"extra": "ignore"}

    category: str
    urgency: str
    complexity: str = ""
    response_time: str = ""
    key_points: list[str] = []
    follow_up_actions: list[str] = []
    estimated_value: str = ""
    customer_type: str = ""
    draft_reply: str = ""


class EnrichmentOutcome(BaseModel):
    """Result of an enrichment attempt: either an enrichment or an error."""

    enrichment: Optional[EnrichmentResult] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.enrichment is not None


# ---------------------------------------------------------------------------
# Response bodies
# ---------------------------------------------------------------------------

class ContactSuccessResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    message: str
    submission_id: str = Field(alias="submissionId")


class MissingFieldsResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    error: str = "Missing required fields"
    missing_fields: list[str] = Field(alias="missingFields")
    message: str


class ValidationFailedResponse(BaseModel):
    error: str = "Validation failed"
    errors: list[str]
    message: str


class ErrorResponse(BaseModel):
    error: str
    message: str
