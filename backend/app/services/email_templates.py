"""
Email template rendering for contact form submissions.

Renders the two emails sent per submission:
  - the business notification (every field, plus the AI insight block
    when the submission was enriched)
  - the customer acknowledgment (the AI drafted reply when available,
    otherwise the fixed thank-you template)

Templates are pure functions of (SanitizedSubmission, EnrichmentResult |
None, BusinessProfile) so they can be tested without any dispatch code.
Every interpolated value is HTML-escaped in the HTML bodies.
"""

import logging
from datetime import datetime, timezone
from html import escape
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from app.config import BusinessProfile
from app.models.contact import EnrichmentResult, SanitizedSubmission

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Shared styles
# ---------------------------------------------------------------------------

_BASE_STYLE = """\
        body { font-family: Arial, sans-serif; line-height: 1.6; color: #333; }
        .container { max-width: 600px; margin: 0 auto; padding: 20px; }
        .header { background: #2563eb; color: white; padding: 20px; text-align: center; }"""

_BUSINESS_STYLE = _BASE_STYLE + """
        .content { background: #f8f9fa; padding: 20px; }
        .field { margin-bottom: 15px; }
        .label { font-weight: bold; color: #2563eb; }
        .insights { background: #eef2ff; border-left: 4px solid #2563eb; padding: 15px; margin-top: 20px; }
        .draft { background: white; border: 1px dashed #94a3b8; padding: 15px; margin-top: 20px; }
        .footer { background: #333; color: white; padding: 15px; text-align: center; font-size: 12px; }"""

_CUSTOMER_STYLE = _BASE_STYLE + """
        .content { padding: 20px; }
        .footer { background: #f8f9fa; padding: 15px; text-align: center; }"""


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def format_submitted_at(submitted_at: str, tz_name: str) -> str:
    """
    Render an ISO-8601 timestamp in the business timezone.

    Output looks like "19/10/2026, 3:04:05 pm". Falls back to UTC for an
    unknown timezone, and to the raw string if it cannot be parsed.
    """
    try:
        moment = datetime.fromisoformat(submitted_at.replace("Z", "+00:00"))
    except ValueError:
        return submitted_at
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)

    try:
        local = moment.astimezone(ZoneInfo(tz_name))
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown timezone %r; rendering submission time in UTC", tz_name)
        local = moment.astimezone(timezone.utc)

    hour = local.hour % 12 or 12
    meridiem = "am" if local.hour < 12 else "pm"
    return f"{local:%d/%m/%Y}, {hour}:{local:%M:%S} {meridiem}"


def _html_multiline(value: str) -> str:
    return escape(value).replace("\n", "<br>")


def _html_list(items: list[str]) -> str:
    return "".join(f"<li>{escape(item)}</li>" for item in items)


def _text_list(items: list[str]) -> str:
    return "\n".join(f"- {item}" for item in items)


def _html_document(style: str, header: str, content: str, footer: str) -> str:
    return f"""
<!DOCTYPE html>
<html>
<head>
    <meta charset="UTF-8">
    <style>
{style}
    </style>
</head>
<body>
    <div class="container">
        <div class="header">
            <h1>{header}</h1>
        </div>
        <div class="content">
{content}
        </div>
        <div class="footer">
{footer}
        </div>
    </div>
</body>
</html>"""


# ---------------------------------------------------------------------------
# Business notification
# ---------------------------------------------------------------------------

def business_email_subject(
    submission: SanitizedSubmission,
    enrichment: Optional[EnrichmentResult] = None,
) -> str:
    if enrichment is not None:
        return f"[{enrichment.urgency.upper()}] New {enrichment.category} Inquiry - {submission.name}"
    return f"New Contact Form Submission - {submission.name}"


def _business_insights_html(enrichment: EnrichmentResult) -> str:
    rows = [
        ("Category", enrichment.category),
        ("Urgency", enrichment.urgency),
        ("Complexity", enrichment.complexity),
        ("Recommended Response", enrichment.response_time),
        ("Customer Type", enrichment.customer_type),
        ("Estimated Value", enrichment.estimated_value),
    ]
    parts = ['            <div class="insights">', "                <h2>AI Insights</h2>"]
    for label, value in rows:
        if value:
            parts.append(
                f'                <div class="field"><span class="label">{label}:</span> {escape(value)}</div>'
            )
    if enrichment.key_points:
        parts.append(
            f'                <div class="field"><span class="label">Key Points:</span>'
            f"<ul>{_html_list(enrichment.key_points)}</ul></div>"
        )
    if enrichment.follow_up_actions:
        parts.append(
            f'                <div class="field"><span class="label">Follow-up Actions:</span>'
            f"<ul>{_html_list(enrichment.follow_up_actions)}</ul></div>"
        )
    parts.append("            </div>")
    if enrichment.draft_reply:
        parts.append('            <div class="draft">')
        parts.append('                <span class="label">Suggested Reply:</span><br>')
        parts.append(f"                {_html_multiline(enrichment.draft_reply)}")
        parts.append("            </div>")
    return "\n".join(parts)


def business_email_html(
    submission: SanitizedSubmission,
    enrichment: Optional[EnrichmentResult] = None,
    business: Optional[BusinessProfile] = None,
) -> str:
    business = business or BusinessProfile()
    submitted = format_submitted_at(submission.submitted_at, business.timezone)
    email = escape(submission.email)
    phone = escape(submission.phone)

    content = f"""\
            <div class="field">
                <span class="label">Name:</span> {escape(submission.name)}
            </div>
            <div class="field">
                <span class="label">Email:</span> <a href="mailto:{email}">{email}</a>
            </div>
            <div class="field">
                <span class="label">Phone:</span> <a href="tel:{phone}">{phone}</a>
            </div>
            <div class="field">
                <span class="label">Suburb:</span> {escape(submission.suburb)}
            </div>
            <div class="field">
                <span class="label">Service Interest:</span> {escape(submission.service)}
            </div>
            <div class="field">
                <span class="label">Preferred Contact:</span> {escape(submission.preferred_contact)}
            </div>
            <div class="field">
                <span class="label">Message:</span><br>
                {_html_multiline(submission.message)}
            </div>
            <div class="field">
                <span class="label">Submitted:</span> {submitted}
            </div>"""
    if enrichment is not None:
        content += "\n" + _business_insights_html(enrichment)

    footer = (
        f"            <p>This email was automatically generated from the "
        f"{escape(business.name)} website contact form.</p>"
    )
    return _html_document(_BUSINESS_STYLE, "New Contact Form Submission", content, footer)


def business_email_text(
    submission: SanitizedSubmission,
    enrichment: Optional[EnrichmentResult] = None,
    business: Optional[BusinessProfile] = None,
) -> str:
    business = business or BusinessProfile()
    submitted = format_submitted_at(submission.submitted_at, business.timezone)

    text = f"""
New Contact Form Submission - {business.name}

Name: {submission.name}
Email: {submission.email}
Phone: {submission.phone}
Suburb: {submission.suburb}
Service Interest: {submission.service}
Preferred Contact: {submission.preferred_contact}

Message:
{submission.message}

Submitted: {submitted}
"""
    if enrichment is not None:
        text += f"""
AI Insights
Category: {enrichment.category}
Urgency: {enrichment.urgency}
Complexity: {enrichment.complexity}
Recommended Response: {enrichment.response_time}
Customer Type: {enrichment.customer_type}
Estimated Value: {enrichment.estimated_value}
"""
        if enrichment.key_points:
            text += f"\nKey Points:\n{_text_list(enrichment.key_points)}\n"
        if enrichment.follow_up_actions:
            text += f"\nFollow-up Actions:\n{_text_list(enrichment.follow_up_actions)}\n"
        if enrichment.draft_reply:
            text += f"\nSuggested Reply:\n{enrichment.draft_reply}\n"

    text += f"""
---
This email was automatically generated from the {business.name} website contact form.
"""
    return text


# ---------------------------------------------------------------------------
# Customer acknowledgment
# ---------------------------------------------------------------------------

def customer_email_subject(business: Optional[BusinessProfile] = None) -> str:
    business = business or BusinessProfile()
    return f"Thank you for contacting {business.name}"


def _phone_href(phone: str) -> str:
    return "tel:" + "".join(ch for ch in phone if ch.isalnum() or ch == "+")


def customer_email_html(
    submission: SanitizedSubmission,
    enrichment: Optional[EnrichmentResult] = None,
    business: Optional[BusinessProfile] = None,
) -> str:
    business = business or BusinessProfile()
    name = escape(business.name)
    phone = escape(business.phone)
    phone_line = (
        f"            <p><strong>Need immediate assistance?</strong><br>\n"
        f'            Call us directly at <a href="{escape(_phone_href(business.phone))}">{phone}</a></p>'
    )

    if enrichment is not None and enrichment.draft_reply:
        content = f"""\
            <p>{_html_multiline(enrichment.draft_reply)}</p>

{phone_line}"""
    else:
        content = f"""\
            <p>Thank you for contacting {name}. We have received your inquiry about our HVAC services in {escape(submission.suburb)}.</p>

            <p><strong>What happens next?</strong></p>
            <ul>
                <li>We will review your inquiry within 2 hours during business hours</li>
                <li>One of our certified technicians will contact you within 24 hours</li>
                <li>We'll provide a free, no-obligation quote for your HVAC needs</li>
            </ul>

            <p><strong>Your submission details:</strong></p>
            <ul>
                <li>Service Interest: {escape(submission.service)}</li>
                <li>Preferred Contact: {escape(submission.preferred_contact)}</li>
                <li>Contact Phone: {escape(submission.phone)}</li>
            </ul>

{phone_line}

            <p>Thank you for choosing {name} for your heating and cooling needs!</p>"""

    footer = f"""\
            <p><strong>{name}</strong><br>
            Professional HVAC Services<br>
            Serving {escape(business.service_area)}<br>
            <a href="{escape(business.website)}">{escape(business.website.split("://")[-1])}</a></p>"""
    header = f"Thank You, {escape(submission.name)}!"
    return _html_document(_CUSTOMER_STYLE, header, content, footer)


def customer_email_text(
    submission: SanitizedSubmission,
    enrichment: Optional[EnrichmentResult] = None,
    business: Optional[BusinessProfile] = None,
) -> str:
    business = business or BusinessProfile()
    phone_line = f"Need immediate assistance?\nCall us directly at {business.phone}"

    if enrichment is not None and enrichment.draft_reply:
        body = f"""
{enrichment.draft_reply}

{phone_line}
"""
    else:
        body = f"""
Thank You, {submission.name}!

Thank you for contacting {business.name}. We have received your inquiry about our HVAC services in {submission.suburb}.

What happens next?
- We will review your inquiry within 2 hours during business hours
- One of our certified technicians will contact you within 24 hours
- We'll provide a free, no-obligation quote for your HVAC needs

Your submission details:
- Service Interest: {submission.service}
- Preferred Contact: {submission.preferred_contact}
- Contact Phone: {submission.phone}

{phone_line}

Thank you for choosing {business.name} for your heating and cooling needs!
"""

    return body + f"""
---
{business.name}
Professional HVAC Services
Serving {business.service_area}
{business.website}
"""
