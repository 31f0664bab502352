"""
AI enrichment service.

Asks Claude to classify an inquiry (category, urgency, likely value, ...)
and draft a reply to the customer. This is strictly best-effort:
enrich_submission never raises, and a failed or garbled answer just means
the emails go out with the plain templates.

Public API:
  AnthropicClassifier(api_key, model).classify(prompt) -> str
  build_enrichment_prompt(submission, business) -> str
  extract_json_object(text) -> dict
  enrich_submission(classifier, submission, business) -> EnrichmentOutcome
"""

import json
import logging
from typing import Optional, Protocol

import anthropic

from app.config import DEFAULT_ANTHROPIC_MODEL, BusinessProfile
from app.models.contact import EnrichmentOutcome, EnrichmentResult, SanitizedSubmission

logger = logging.getLogger(__name__)

# Model configuration
MAX_TOKENS = 1024
TEMPERATURE = 0.3
# Timeout in seconds; the form submitter is waiting on this call.
_AI_ENRICHMENT_TIMEOUT = 15

SYSTEM_PROMPT = (
    "You are a customer service assistant for {business_name}, an HVAC "
    "(heating, ventilation and air conditioning) business serving "
    "{service_area}. You triage website inquiries and draft friendly, "
    "professional replies. Always answer with a single JSON object."
)

ENRICHMENT_PROMPT = """\
Analyze this customer inquiry submitted through our website contact form.

Customer details:
- Name: {name}
- Email: {email}
- Phone: {phone}
- Suburb: {suburb}
- Service interest: {service}
- Preferred contact method: {preferred_contact}
- Submitted at: {submitted_at}

Message:
{message}

Respond with ONLY a JSON object matching this schema:
{{
  "category": string,            // e.g. "Installation", "Repair", "Maintenance", "Quote", "General"
  "urgency": "low" | "medium" | "high",
  "complexity": "simple" | "moderate" | "complex",
  "response_time": string,       // e.g. "within 2 hours", "same day", "within 24 hours"
  "key_points": [string],        // the main things the customer is asking about
  "follow_up_actions": [string], // what our team should do next
  "estimated_value": string,     // e.g. "low (<$500)", "medium ($500-$3000)", "high (>$3000)"
  "customer_type": string,       // e.g. "residential", "commercial", "property manager"
  "draft_reply": string          // a warm reply to the customer, signed "The {business_name} Team"
}}

The draft reply must not promise prices or exact appointment times.
"""


class Classifier(Protocol):
    def classify(self, prompt: str) -> str: ...


class AnthropicClassifier:
    """Text classification backed by the Anthropic Messages API."""

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_ANTHROPIC_MODEL,
        system_prompt: str = "",
    ):
        self.api_key = api_key
        self.model = model
        self.system_prompt = system_prompt

    def classify(self, prompt: str) -> str:
        client = anthropic.Anthropic(api_key=self.api_key)
        response = client.messages.create(
            model=self.model,
            max_tokens=MAX_TOKENS,
            temperature=TEMPERATURE,
            timeout=_AI_ENRICHMENT_TIMEOUT,
            system=self.system_prompt,
            messages=[{"role": "user", "content": prompt}],
        )
        return response.content[0].text


def build_system_prompt(business: BusinessProfile) -> str:
    return SYSTEM_PROMPT.format(
        business_name=business.name,
        service_area=business.service_area,
    )


def build_enrichment_prompt(
    submission: SanitizedSubmission,
    business: Optional[BusinessProfile] = None,
) -> str:
    """Embed every sanitized field into the classification prompt."""
    business = business or BusinessProfile()
    return ENRICHMENT_PROMPT.format(
        name=submission.name,
        email=submission.email,
        phone=submission.phone,
        suburb=submission.suburb,
        service=submission.service,
        preferred_contact=submission.preferred_contact,
        submitted_at=submission.submitted_at,
        message=submission.message,
        business_name=business.name,
    )


def extract_json_object(text: str) -> dict:
    """
    Return the first balanced ``{...}`` object embedded in free text.

    Braces inside JSON string literals are ignored, so a draft reply that
    mentions "{" does not throw the scan off. Markdown fences and prose
    around the object are skipped.

    Raises:
        ValueError: no balanced object found, or it is not valid JSON.
    """
    start = text.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for i in range(start, len(text)):
            ch = text[i]
            if in_string:
                if escaped:
                    escaped = False
                elif ch == "\\":
                    escaped = True
                elif ch == '"':
                    in_string = False
                continue
            if ch == '"':
                in_string = True
            elif ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
                if depth == 0:
                    parsed = json.loads(text[start:i + 1])
                    if not isinstance(parsed, dict):
                        raise ValueError("Classifier output is not a JSON object")
                    return parsed
        # Unbalanced from this brace; try the next one.
        start = text.find("{", start + 1)

    raise ValueError("No JSON object found in classifier output")


def enrich_submission(
    classifier: Classifier,
    submission: SanitizedSubmission,
    business: Optional[BusinessProfile] = None,
) -> EnrichmentOutcome:
    """
    Classify a submission. Never raises.

    Returns:
        EnrichmentOutcome with ``enrichment`` set on success, or ``error``
        describing why enrichment is absent.
    """
    try:
        prompt = build_enrichment_prompt(submission, business)
        raw_text = classifier.classify(prompt)
        parsed = extract_json_object(raw_text)
        enrichment = EnrichmentResult(**parsed)
    except Exception as exc:
        logger.debug("enrich_submission: falling back to no enrichment", exc_info=True)
        return EnrichmentOutcome(error=f"{type(exc).__name__}: {exc}")

    return EnrichmentOutcome(enrichment=enrichment)
