"""
Provider-agnostic outbound email model.

The dispatcher builds these from a sanitized submission; only the sender
implementation knows how to map them onto a provider SDK (SendGrid).
"""

from typing import Literal, Optional

from pydantic import BaseModel


class EmailAddress(BaseModel):
    """An address with an optional display name."""

    email: str
    name: Optional[str] = None


class OutboundEmail(BaseModel):
    to: EmailAddress
    sender: EmailAddress
    reply_to: Optional[EmailAddress] = None
    subject: str
    html: str
    text: str


class DispatchOutcome(BaseModel):
    """Result of sending one OutboundEmail."""

    recipient: str
    status: Literal["sent", "error"]
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == "sent"
