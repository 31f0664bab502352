"""
Email dispatch tests with a MOCKED SendGrid client.

Coverage:
  - build_business_email / build_customer_email addressing and content
  - SendGridEmailSender maps OutboundEmail onto a SendGrid Mail
  - dispatch_emails sends everything concurrently, reports per-email outcomes,
    never raises
"""

import asyncio
import threading
from unittest.mock import MagicMock, Mock

import pytest

from app.config import BusinessProfile, Settings
from app.models.contact import EnrichmentResult, SanitizedSubmission
from app.models.outbound_email import DispatchOutcome, EmailAddress, OutboundEmail
from app.services.email_dispatch import (
    SendGridEmailSender,
    build_business_email,
    build_customer_email,
    dispatch_emails,
)


def _make_settings(**overrides) -> Settings:
    fields = {
        "sendgrid_api_key": "SG.test-key",
        "to_email": "office@kryshvac.com.au",
    }
    fields.update(overrides)
    return Settings(**fields)


def _make_sanitized(**overrides) -> SanitizedSubmission:
    fields = {
        "name": "Jo Lee",
        "email": "jo@example.com",
        "phone": "0400 123 456",
        "suburb": "Footscray",
        "message": "Need a quote for a split system install",
        "submitted_at": "2026-10-19T03:04:05.000Z",
    }
    fields.update(overrides)
    return SanitizedSubmission(**fields)


def _make_email(to: str = "jo@example.com") -> OutboundEmail:
    return OutboundEmail(
        to=EmailAddress(email=to, name="Jo Lee"),
        sender=EmailAddress(email="noreply@kryshvac.com.au", name="Krysh HVAC"),
        reply_to=EmailAddress(email="office@kryshvac.com.au", name="Office"),
        subject="Hello",
        html="<p>Hello</p>",
        text="Hello",
    )


class _RecordingSender:
    def __init__(self, fail_for: tuple[str, ...] = ()):
        self.fail_for = set(fail_for)
        self.sent: list[OutboundEmail] = []
        self.threads: set[int] = set()

    def send(self, email: OutboundEmail) -> None:
        self.threads.add(threading.get_ident())
        if email.to.email in self.fail_for:
            raise RuntimeError("HTTP Error 503: Service Unavailable")
        self.sent.append(email)


class _BarrierSender:
    """Every send waits until the other send is also in flight."""
    def __init__(self, parties: int = 2):
        self.barrier = threading.Barrier(parties)
        self.sent: list[str] = []

    def send(self, email: OutboundEmail) -> None:
        self.barrier.wait(timeout=5)
        self.sent.append(email.to.email)


# ===========================================================================
# Message builders
# ===========================================================================

class TestBuildBusinessEmail:

    def test_addressing(self):
        email = build_business_email(_make_sanitized(), None, _make_settings())

        assert email.to == EmailAddress(email="office@kryshvac.com.au")
        assert email.sender == EmailAddress(email="noreply@kryshvac.com.au", name="Krysh HVAC Website")
        assert email.reply_to == EmailAddress(email="jo@example.com", name="Jo Lee")

    def test_custom_from_address_and_business_name(self):
        settings = _make_settings(
            from_email="leads@coolair.example",
            business=BusinessProfile(name="Cool Air Co"),
        )
        email = build_business_email(_make_sanitized(), None, settings)
        assert email.sender == EmailAddress(email="leads@coolair.example", name="Cool Air Co Website")

    def test_plain_subject_without_enrichment(self):
        email = build_business_email(_make_sanitized(), None, _make_settings())
        assert email.subject == "New Contact Form Submission - Jo Lee"
        assert "Need a quote for a split system install" in email.text
        assert "Need a quote for a split system install" in email.html

    def test_enriched_subject(self):
        enrichment = EnrichmentResult(category="Repair", urgency="high")
        email = build_business_email(_make_sanitized(), enrichment, _make_settings())
        assert email.subject == "[HIGH] New Repair Inquiry - Jo Lee"
        assert "AI Insights" in email.html


class TestBuildCustomerEmail:

    def test_addressing(self):
        email = build_customer_email(_make_sanitized(), None, _make_settings())

        assert email.to == EmailAddress(email="jo@example.com", name="Jo Lee")
        assert email.sender == EmailAddress(email="noreply@kryshvac.com.au", name="Krysh HVAC")
        assert email.reply_to is None
        assert email.subject == "Thank you for contacting Krysh HVAC"

    def test_drafted_reply_used(self):
        enrichment = EnrichmentResult(
            category="Repair", urgency="low", draft_reply="Hi Jo, we'd love to help."
        )
        email = build_customer_email(_make_sanitized(), enrichment, _make_settings())
        assert "Hi Jo, we'd love to help." in email.text
        assert "Call us directly at" in email.text


# ===========================================================================
# SendGridEmailSender
# ===========================================================================

class TestSendGridEmailSender:

    def test_to_mail_maps_every_field(self):
        mail = SendGridEmailSender.to_mail(_make_email()).get()

        assert mail["from"] == {"email": "noreply@kryshvac.com.au", "name": "Krysh HVAC"}
        assert mail["reply_to"] == {"email": "office@kryshvac.com.au", "name": "Office"}
        assert mail["subject"] == "Hello"
        assert mail["personalizations"][0]["to"] == [{"email": "jo@example.com", "name": "Jo Lee"}]
        contents = {c["type"]: c["value"] for c in mail["content"]}
        assert contents == {"text/plain": "Hello", "text/html": "<p>Hello</p>"}

    def test_to_mail_without_reply_to(self):
        email = _make_email().model_copy(update={"reply_to": None})
        mail = SendGridEmailSender.to_mail(email).get()
        assert "reply_to" not in mail

    def test_send_uses_api_key(self, mocker):
        mock_client = MagicMock()
        mock_client.send.return_value = Mock(status_code=202, headers={"X-Message-Id": "msg-1"})
        mock_ctor = mocker.patch(
            "app.services.email_dispatch.SendGridAPIClient", return_value=mock_client
        )

        SendGridEmailSender("SG.test-key").send(_make_email())

        mock_ctor.assert_called_once_with(api_key="SG.test-key")
        mock_client.send.assert_called_once()
        sent_mail = mock_client.send.call_args[0][0]
        assert sent_mail.get()["subject"] == "Hello"

    def test_send_propagates_provider_errors(self, mocker):
        mock_client = MagicMock()
        mock_client.send.side_effect = Exception("HTTP Error 401: Unauthorized")
        mocker.patch("app.services.email_dispatch.SendGridAPIClient", return_value=mock_client)

        with pytest.raises(Exception, match="Unauthorized"):
            SendGridEmailSender("SG.bad-key").send(_make_email())


# ===========================================================================
# dispatch_emails
# ===========================================================================

class TestDispatchEmails:

    def test_sends_all_and_reports_success(self):
        sender = _RecordingSender()
        emails = [_make_email("office@kryshvac.com.au"), _make_email("jo@example.com")]

        outcomes = asyncio.run(dispatch_emails(sender, emails))

        assert [o.recipient for o in outcomes] == ["office@kryshvac.com.au", "jo@example.com"]
        assert all(o.ok for o in outcomes)
        assert len(sender.sent) == 2

    def test_one_failure_does_not_stop_the_other(self):
        sender = _RecordingSender(fail_for=("jo@example.com",))
        emails = [_make_email("office@kryshvac.com.au"), _make_email("jo@example.com")]

        outcomes = asyncio.run(dispatch_emails(sender, emails))

        assert outcomes[0] == DispatchOutcome(recipient="office@kryshvac.com.au", status="sent")
        assert outcomes[1].status == "error"
        assert "503" in outcomes[1].error
        assert [e.to.email for e in sender.sent] == ["office@kryshvac.com.au"]

    def test_sends_off_the_event_loop_thread(self):
        sender = _RecordingSender()

        async def run():
            loop_thread = threading.get_ident()
            await dispatch_emails(sender, [_make_email()])
            return loop_thread

        loop_thread = asyncio.run(run())
        assert loop_thread not in sender.threads

    def test_sends_run_concurrently(self):
        """A sequential dispatch would break the barrier and report two errors."""
        sender = _BarrierSender()
        emails = [_make_email("office@kryshvac.com.au"), _make_email("jo@example.com")]

        outcomes = asyncio.run(dispatch_emails(sender, emails))

        assert [o.status for o in outcomes] == ["sent", "sent"]
        assert sorted(sender.sent) == ["jo@example.com", "office@kryshvac.com.au"]

    def test_no_emails(self):
        assert asyncio.run(dispatch_emails(_RecordingSender(), [])) == []
