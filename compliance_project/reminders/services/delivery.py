"""
Delivery adapter: one summary message per call through the active
mail provider. Failures are reported, never retried here; the next
scheduled period is the retry.
"""

import logging
from dataclasses import dataclass
from email.utils import formataddr, make_msgid, parseaddr

from django.conf import settings
from django.core.mail import EmailMultiAlternatives, get_connection
from django.utils.html import format_html, strip_tags

from .templating import RenderedMessage

logger = logging.getLogger(__name__)

SIMULATED_PROVIDER = "simulated"
SMTP_BACKEND = "django.core.mail.backends.smtp.EmailBackend"


@dataclass(frozen=True)
class Envelope:
    to: tuple = ()
    cc: tuple = ()
    bcc: tuple = ()


@dataclass(frozen=True)
class DeliveryResult:
    success: bool
    provider: str
    error: str = ""
    message_id: str = ""


def build_envelope(recipients, mode, sender):
    """
    bcc: the sender addresses itself, recipients are hidden.
    cc:  first recipient in To, the rest copied.
    to:  everybody in To.
    """
    recipients = tuple(recipients)
    if mode == "bcc":
        return Envelope(to=(sender,), bcc=recipients)
    if mode == "cc":
        return Envelope(to=recipients[:1], cc=recipients[1:])
    return Envelope(to=recipients)


def sender_identity(provider):
    """(From header, bare address) for the active provider."""
    if provider.smtp_from_email:
        address = provider.smtp_from_email
        name = provider.smtp_from_name
    else:
        name, address = parseaddr(settings.DEFAULT_FROM_EMAIL)
    header = formataddr((name, address)) if name else address
    return header, address


def provider_name(provider):
    if provider.uses_smtp_override:
        return "smtp"
    # "django.core.mail.backends.locmem.EmailBackend" -> "locmem"
    parts = settings.EMAIL_BACKEND.split(".")
    return parts[-2] if len(parts) >= 2 else settings.EMAIL_BACKEND


def open_connection(provider):
    if not provider.uses_smtp_override:
        return get_connection(fail_silently=False)

    return get_connection(
        SMTP_BACKEND,
        fail_silently=False,
        host=provider.smtp_host,
        port=provider.smtp_port,
        username=provider.smtp_user or None,
        password=provider.smtp_password or None,
        use_tls=provider.smtp_tls_mode == "starttls",
        use_ssl=provider.smtp_tls_mode == "smtps",
        timeout=settings.EMAIL_TIMEOUT,
    )


def build_message(message, envelope, from_header, connection=None):
    msg = EmailMultiAlternatives(
        subject=message.subject,
        body=strip_tags(message.body.replace("<br>", "\n")),
        from_email=from_header,
        to=list(envelope.to),
        cc=list(envelope.cc),
        bcc=list(envelope.bcc),
        connection=connection,
        headers={"Message-ID": make_msgid(domain="reminders")},
    )
    msg.attach_alternative(message.body, "text/html")
    return msg


def _send(message, envelope, from_header, provider, recipient_count, mode):
    name = provider_name(provider)
    try:
        connection = open_connection(provider)
        msg = build_message(message, envelope, from_header, connection)
        sent = msg.send()
    except Exception as exc:
        # Any backend failure is a delivery failure, whatever the backend raises
        logger.error("Delivery via %s failed: %s", name, exc)
        return DeliveryResult(
            success=False,
            provider=name,
            error=str(exc) or exc.__class__.__name__,
        )

    if not sent:
        logger.error("Delivery via %s failed: provider accepted no message", name)
        return DeliveryResult(
            success=False,
            provider=name,
            error="Provider accepted no message",
        )

    logger.info(
        "Delivered '%s' via %s to %s recipient(s) (%s)",
        message.subject, name, recipient_count, mode,
    )
    return DeliveryResult(
        success=True,
        provider=name,
        message_id=msg.extra_headers.get("Message-ID", ""),
    )


def deliver(message, recipients, delivery_mode, provider, test_mode=False):
    """Send `message` (a RenderedMessage) to `recipients`."""
    from_header, sender = sender_identity(provider)
    envelope = build_envelope(recipients, delivery_mode, sender)

    if test_mode:
        logger.info(
            "Test mode: simulated delivery to %s recipient(s) (%s)",
            len(recipients), delivery_mode,
        )
        return DeliveryResult(success=True, provider=SIMULATED_PROVIDER)

    return _send(message, envelope, from_header, provider, len(recipients), delivery_mode)


# ============================================================
# PROVIDER CHECK
# ============================================================

TEST_EMAIL_SUBJECT = "Test e-mail - Compliance reminders"


def provider_diagnostics(provider):
    """Connection facts reported with a provider check (never the password)."""
    _, sender = sender_identity(provider)
    if provider.uses_smtp_override:
        return {
            "provider": "smtp",
            "host": provider.smtp_host,
            "port": provider.smtp_port,
            "tlsMode": provider.smtp_tls_mode,
            "authEnabled": bool(provider.smtp_user),
            "fromEmail": sender,
        }
    return {
        "provider": provider_name(provider),
        "host": settings.EMAIL_HOST,
        "port": settings.EMAIL_PORT,
        "tlsMode": "starttls" if settings.EMAIL_USE_TLS else "none",
        "authEnabled": bool(settings.EMAIL_HOST_USER),
        "fromEmail": sender,
    }


def send_test_email(to, provider):
    """
    Send one real message to `to` through the configured provider so an
    operator can verify the mail settings. Nothing is audited.

    Returns (DeliveryResult, diagnostics dict).
    """
    diagnostics = provider_diagnostics(provider)
    from_header, _ = sender_identity(provider)

    body = format_html(
        "<h2>Test e-mail</h2>"
        "<p>The mail provider is configured correctly.</p>"
        "<p>Provider: {}<br>Server: {}:{}<br>Encryption: {}<br>Sender: {}</p>",
        diagnostics["provider"],
        diagnostics["host"],
        diagnostics["port"],
        diagnostics["tlsMode"],
        diagnostics["fromEmail"],
    )
    message = RenderedMessage(subject=TEST_EMAIL_SUBJECT, body=body)

    logger.info("Sending provider test e-mail to %s via %s", to, diagnostics["provider"])
    result = _send(message, Envelope(to=(to,)), from_header, provider, 1, "to")
    return result, diagnostics
