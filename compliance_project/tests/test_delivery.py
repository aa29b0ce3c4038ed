"""Delivery envelope shapes and provider outcomes."""

import smtplib

import pytest
from django.core import mail
from django.core.mail.backends.locmem import EmailBackend

from reminders.config import EmailProviderConfig
from reminders.models import ReminderLog
from reminders.services.delivery import (
    SIMULATED_PROVIDER,
    TEST_EMAIL_SUBJECT,
    build_envelope,
    deliver,
    provider_diagnostics,
    provider_name,
    send_test_email,
    sender_identity,
)
from reminders.services.templating import RenderedMessage

RECIPIENTS = ("a@example.com", "b@example.com", "c@example.com")
MESSAGE = RenderedMessage(subject="Summary", body="Hello<br><table></table>")


# =============================================================================
# ENVELOPE
# =============================================================================


def test_bcc_envelope_addresses_the_sender():
    envelope = build_envelope(RECIPIENTS, "bcc", "noreply@example.com")
    assert envelope.to == ("noreply@example.com",)
    assert envelope.cc == ()
    assert envelope.bcc == RECIPIENTS


def test_cc_envelope():
    envelope = build_envelope(RECIPIENTS, "cc", "noreply@example.com")
    assert envelope.to == ("a@example.com",)
    assert envelope.cc == ("b@example.com", "c@example.com")
    assert envelope.bcc == ()


def test_to_envelope():
    envelope = build_envelope(RECIPIENTS, "to", "noreply@example.com")
    assert envelope.to == RECIPIENTS
    assert envelope.cc == envelope.bcc == ()


# =============================================================================
# SENDER / PROVIDER
# =============================================================================


def test_sender_from_default_from_email():
    header, address = sender_identity(EmailProviderConfig())
    assert header == "Compliance Reminders <noreply@example.com>"
    assert address == "noreply@example.com"


def test_sender_from_smtp_override():
    provider = EmailProviderConfig(
        smtp_host="smtp.example.com",
        smtp_from_email="alerts@example.com",
        smtp_from_name="Alerts",
    )
    assert sender_identity(provider) == ("Alerts <alerts@example.com>", "alerts@example.com")
    assert provider_name(provider) == "smtp"


def test_provider_name_of_default_backend():
    assert provider_name(EmailProviderConfig()) == "locmem"


# =============================================================================
# DELIVER
# =============================================================================


def test_test_mode_is_simulated():
    result = deliver(MESSAGE, RECIPIENTS, "bcc", EmailProviderConfig(), test_mode=True)

    assert result.success
    assert result.provider == SIMULATED_PROVIDER
    assert mail.outbox == []


def test_single_message_with_hidden_recipients():
    result = deliver(MESSAGE, RECIPIENTS, "bcc", EmailProviderConfig())

    assert result.success
    assert result.provider == "locmem"
    assert result.message_id

    assert len(mail.outbox) == 1
    sent = mail.outbox[0]
    assert sent.subject == "Summary"
    assert sent.to == ["noreply@example.com"]
    assert sent.bcc == list(RECIPIENTS)
    assert sent.alternatives[0][0] == MESSAGE.body
    assert "<br>" not in sent.body


def test_provider_failure_is_reported(monkeypatch):
    def refuse(self, messages):
        raise smtplib.SMTPException("relay access denied")

    monkeypatch.setattr(EmailBackend, "send_messages", refuse)

    result = deliver(MESSAGE, RECIPIENTS, "to", EmailProviderConfig())

    assert not result.success
    assert result.provider == "locmem"
    assert result.error == "relay access denied"


def test_any_backend_exception_is_a_failed_result(monkeypatch):
    def explode(self, messages):
        raise RuntimeError("backend exploded")

    monkeypatch.setattr(EmailBackend, "send_messages", explode)

    result = deliver(MESSAGE, RECIPIENTS, "bcc", EmailProviderConfig())

    assert not result.success
    assert result.error == "backend exploded"


def test_message_less_exception_reports_its_class(monkeypatch):
    def explode(self, messages):
        raise ConnectionResetError()

    monkeypatch.setattr(EmailBackend, "send_messages", explode)

    result = deliver(MESSAGE, RECIPIENTS, "to", EmailProviderConfig())

    assert result.error == "ConnectionResetError"


def test_nothing_accepted_is_a_failure(monkeypatch):
    monkeypatch.setattr(EmailBackend, "send_messages", lambda self, messages: 0)

    result = deliver(MESSAGE, RECIPIENTS, "to", EmailProviderConfig())

    assert not result.success
    assert result.error == "Provider accepted no message"


@pytest.mark.parametrize("mode", ["to", "cc", "bcc"])
def test_every_mode_sends_exactly_one_message(mode):
    deliver(MESSAGE, RECIPIENTS, mode, EmailProviderConfig())
    assert len(mail.outbox) == 1
    sent = mail.outbox[0]
    assert set(sent.recipients()) >= set(RECIPIENTS)


# =============================================================================
# PROVIDER CHECK
# =============================================================================


@pytest.mark.django_db
def test_send_test_email_reaches_one_address():
    result, diagnostics = send_test_email("ops@example.com", EmailProviderConfig())

    assert result.success
    assert len(mail.outbox) == 1
    sent = mail.outbox[0]
    assert sent.to == ["ops@example.com"]
    assert sent.subject == TEST_EMAIL_SUBJECT
    assert diagnostics["provider"] == "locmem"
    assert diagnostics["fromEmail"] == "noreply@example.com"
    assert ReminderLog.objects.count() == 0


def test_send_test_email_reports_provider_failure(monkeypatch):
    def refuse(self, messages):
        raise smtplib.SMTPAuthenticationError(535, b"bad credentials")

    monkeypatch.setattr(EmailBackend, "send_messages", refuse)

    result, diagnostics = send_test_email("ops@example.com", EmailProviderConfig())

    assert not result.success
    assert result.error
    assert diagnostics["provider"] == "locmem"


def test_smtp_diagnostics_hide_the_password():
    provider = EmailProviderConfig(
        smtp_host="smtp.example.com",
        smtp_port=465,
        smtp_user="mailer",
        smtp_password="s3cret",
        smtp_tls_mode="smtps",
    )

    diagnostics = provider_diagnostics(provider)

    assert diagnostics["host"] == "smtp.example.com"
    assert diagnostics["port"] == 465
    assert diagnostics["tlsMode"] == "smtps"
    assert diagnostics["authEnabled"] is True
    assert "s3cret" not in str(diagnostics)
