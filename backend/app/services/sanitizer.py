"""
Input sanitizer for contact form submissions.

This is a narrow guard against script injection into the notification
email HTML, not a general HTML sanitizer: it trims whitespace and removes
<script>...</script> blocks. The email templates HTML-escape everything
they interpolate on top of this.
"""

import re
from datetime import datetime, timezone
from typing import Any, Mapping

from app.models.contact import SanitizedSubmission, ValidatedSubmission

UNKNOWN = "Unknown"

# <script ...> up to the nearest </script>, matching across newlines.
_SCRIPT_RE = re.compile(
    r"<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>",
    re.IGNORECASE,
)


def sanitize_input(value: Any) -> Any:
    """
    Trim a string and strip every <script> block from it.

    Stripping repeats until nothing matches, so split tags such as
    ``<scr<script></script>ipt>`` cannot reassemble into a live block,
    and sanitizing twice gives the same result as sanitizing once.
    Non-string values are returned unchanged.
    """
    if not isinstance(value, str):
        return value

    cleaned = value.strip()
    while True:
        stripped = _SCRIPT_RE.sub("", cleaned)
        if stripped == cleaned:
            break
        cleaned = stripped
    return cleaned.strip()


def utc_timestamp(now: datetime | None = None) -> str:
    """ISO-8601 UTC timestamp with millisecond precision, e.g. 2026-01-02T03:04:05.678Z."""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def client_ip(headers: Mapping[str, str]) -> str:
    """Best-effort client address from proxy headers."""
    return headers.get("x-forwarded-for") or headers.get("x-real-ip") or UNKNOWN


def sanitize_submission(
    submission: ValidatedSubmission,
    headers: Mapping[str, str],
    now: datetime | None = None,
) -> SanitizedSubmission:
    """
    Sanitize every field of a validated submission and attach metadata.

    Args:
        submission: Output of validate_submission.
        headers:    Request headers (case-insensitive mapping, e.g.
                    starlette's Headers, or a plain dict with lower-case keys).
        now:        Submission time override, for tests.
    """
    fields = {
        key: sanitize_input(value)
        for key, value in submission.model_dump().items()
    }
    return SanitizedSubmission(
        **fields,
        submitted_at=utc_timestamp(now),
        user_agent=headers.get("user-agent") or UNKNOWN,
        ip=client_ip(headers),
    )
