"""
Typed reminder configuration.

The admin UI stores free-form JSON blobs in SystemSetting. This module
is the only place that reads them: each blob is parsed into a frozen
dataclass with defaults applied, validated once, and bundled into a
RunConfig snapshot that is passed explicitly to every engine component.
"""

import re
import zoneinfo
from dataclasses import dataclass, field

from django.conf import settings

from .exceptions import ReminderConfigError
from .models import SystemSetting

CONFIG_VERSION = 1

FREQUENCY_TYPES = ("daily", "weekly", "biweekly", "monthly", "custom")
DELIVERY_MODES = ("to", "cc", "bcc")
TLS_MODES = ("starttls", "smtps", "none")

DEFAULT_DAYS_BEFORE = (30, 14, 7)

_TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


# ============================================================
# SETTING KEYS
# ============================================================

FREQUENCY_KEY = "reminder_frequency"
SCHEDULE_KEY = "reminder_schedule"
DAYS_KEY = "reminder_days"
PROVIDER_KEY = "email_provider"


def recipients_key(module):
    return f"{module}_reminder_recipients"


def template_key(module):
    return f"{module}_email_template"


# ============================================================
# CONFIG STRUCTS
# ============================================================

@dataclass(frozen=True)
class ReminderFrequency:
    type: str = "weekly"
    interval_days: int = 7
    start_time: str = "08:00"
    timezone: str = ""
    enabled: bool = True

    @property
    def tzinfo(self):
        return zoneinfo.ZoneInfo(self.timezone or settings.TIME_ZONE)


@dataclass(frozen=True)
class ReminderSchedule:
    enabled: bool = True
    skip_weekends: bool = True


@dataclass(frozen=True)
class ReminderDays:
    days_before: tuple = DEFAULT_DAYS_BEFORE


@dataclass(frozen=True)
class RecipientConfig:
    user_ids: tuple = ()
    delivery_mode: str = "bcc"

    @property
    def is_configured(self):
        return bool(self.user_ids)


@dataclass(frozen=True)
class EmailTemplateOverride:
    subject: str
    body: str


@dataclass(frozen=True)
class EmailProviderConfig:
    smtp_host: str = ""
    smtp_port: int = 587
    smtp_user: str = ""
    smtp_password: str = field(default="", repr=False)
    smtp_from_email: str = ""
    smtp_from_name: str = ""
    smtp_tls_mode: str = "starttls"

    @property
    def uses_smtp_override(self):
        return bool(self.smtp_host)

    @property
    def sender_address(self):
        return self.smtp_from_email or settings.DEFAULT_FROM_EMAIL


@dataclass(frozen=True)
class RunConfig:
    """Everything one engine run needs, loaded once at the start."""

    module: str
    frequency: ReminderFrequency
    schedule: ReminderSchedule
    days: ReminderDays
    recipients: RecipientConfig
    provider: EmailProviderConfig
    template_override: EmailTemplateOverride = None
    version: int = CONFIG_VERSION


# ============================================================
# PARSERS
# ============================================================

def _as_bool(key, value, default):
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    raise ReminderConfigError(key, f"expected a boolean, got {value!r}")


def _as_int(key, value, default, minimum=0):
    if value is None or value == "":
        return default
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ReminderConfigError(key, f"expected an integer, got {value!r}")
    if isinstance(value, bool) or number < minimum:
        raise ReminderConfigError(key, f"expected an integer >= {minimum}, got {value!r}")
    return number


def _as_str(key, value, default=""):
    if value is None:
        return default
    if not isinstance(value, str):
        raise ReminderConfigError(key, f"expected a string, got {value!r}")
    return value.strip()


def _as_mapping(key, raw):
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ReminderConfigError(key, "expected an object")
    return raw


def parse_frequency(raw):
    data = _as_mapping(FREQUENCY_KEY, raw)

    kind = _as_str(FREQUENCY_KEY, data.get("type"), "weekly") or "weekly"
    if kind not in FREQUENCY_TYPES:
        raise ReminderConfigError(FREQUENCY_KEY, f"unknown frequency type {kind!r}")

    interval = _as_int(FREQUENCY_KEY, data.get("interval_days"), 7, minimum=1)

    start_time = _as_str(FREQUENCY_KEY, data.get("start_time"), "08:00") or "08:00"
    if not _TIME_RE.match(start_time):
        raise ReminderConfigError(FREQUENCY_KEY, f"start_time must be HH:MM, got {start_time!r}")

    tz_name = _as_str(FREQUENCY_KEY, data.get("timezone"))
    if tz_name:
        try:
            zoneinfo.ZoneInfo(tz_name)
        except (zoneinfo.ZoneInfoNotFoundError, ValueError):
            raise ReminderConfigError(FREQUENCY_KEY, f"unknown timezone {tz_name!r}")

    return ReminderFrequency(
        type=kind,
        interval_days=interval,
        start_time=start_time,
        timezone=tz_name,
        enabled=_as_bool(FREQUENCY_KEY, data.get("enabled"), True),
    )


def parse_schedule(raw):
    data = _as_mapping(SCHEDULE_KEY, raw)
    return ReminderSchedule(
        enabled=_as_bool(SCHEDULE_KEY, data.get("enabled"), True),
        skip_weekends=_as_bool(SCHEDULE_KEY, data.get("skip_weekends"), True),
    )


def parse_days(raw):
    data = _as_mapping(DAYS_KEY, raw)
    values = data.get("days_before")
    if values is None:
        return ReminderDays()
    if not isinstance(values, (list, tuple)) or not values:
        raise ReminderConfigError(DAYS_KEY, "days_before must be a non-empty list")

    if any(v is None or v == "" for v in values):
        raise ReminderConfigError(DAYS_KEY, "days_before must not contain empty values")

    offsets = sorted({_as_int(DAYS_KEY, v, None) for v in values}, reverse=True)
    return ReminderDays(days_before=tuple(offsets))


def parse_recipients(module, raw):
    key = recipients_key(module)
    data = _as_mapping(key, raw)

    raw_ids = data.get("user_ids") or []
    if not isinstance(raw_ids, (list, tuple)):
        raise ReminderConfigError(key, "user_ids must be a list")

    user_ids = []
    for value in raw_ids:
        if value is None or value == "":
            raise ReminderConfigError(key, "user_ids must not contain empty values")
        user_id = _as_int(key, value, None, minimum=1)
        if user_id not in user_ids:
            user_ids.append(user_id)

    mode = _as_str(key, data.get("delivery_mode"), "bcc") or "bcc"
    if mode not in DELIVERY_MODES:
        raise ReminderConfigError(key, f"unknown delivery mode {mode!r}")

    return RecipientConfig(user_ids=tuple(user_ids), delivery_mode=mode)


def parse_template_override(module, raw):
    key = template_key(module)
    data = _as_mapping(key, raw)
    subject = _as_str(key, data.get("subject"))
    body = _as_str(key, data.get("body"))
    if not subject and not body:
        return None
    if not subject or not body:
        raise ReminderConfigError(key, "both subject and body are required")
    return EmailTemplateOverride(subject=subject, body=body)


def parse_provider(raw):
    data = _as_mapping(PROVIDER_KEY, raw)

    tls_mode = _as_str(PROVIDER_KEY, data.get("smtp_tls_mode"), "starttls") or "starttls"
    if tls_mode not in TLS_MODES:
        raise ReminderConfigError(PROVIDER_KEY, f"unknown TLS mode {tls_mode!r}")

    config = EmailProviderConfig(
        smtp_host=_as_str(PROVIDER_KEY, data.get("smtp_host")),
        smtp_port=_as_int(PROVIDER_KEY, data.get("smtp_port"), 587, minimum=1),
        smtp_user=_as_str(PROVIDER_KEY, data.get("smtp_user")),
        smtp_password=_as_str(PROVIDER_KEY, data.get("smtp_password")),
        smtp_from_email=_as_str(PROVIDER_KEY, data.get("smtp_from_email")),
        smtp_from_name=_as_str(PROVIDER_KEY, data.get("smtp_from_name")),
        smtp_tls_mode=tls_mode,
    )
    if config.uses_smtp_override and not config.smtp_from_email:
        raise ReminderConfigError(PROVIDER_KEY, "smtp_from_email is required with smtp_host")
    return config


# ============================================================
# LOADING
# ============================================================

def load_run_config(module):
    """
    Read every setting the module needs in one query and
    return the validated snapshot.
    """
    keys = [
        FREQUENCY_KEY,
        SCHEDULE_KEY,
        DAYS_KEY,
        PROVIDER_KEY,
        recipients_key(module),
        template_key(module),
    ]
    raw = dict(
        SystemSetting.objects
        .filter(key__in=keys)
        .values_list("key", "value")
    )

    return RunConfig(
        module=module,
        frequency=parse_frequency(raw.get(FREQUENCY_KEY)),
        schedule=parse_schedule(raw.get(SCHEDULE_KEY)),
        days=parse_days(raw.get(DAYS_KEY)),
        recipients=parse_recipients(module, raw.get(recipients_key(module))),
        provider=parse_provider(raw.get(PROVIDER_KEY)),
        template_override=parse_template_override(module, raw.get(template_key(module))),
    )


def load_provider_config():
    """Only the e-mail provider blob, for a provider check outside a run."""
    row = SystemSetting.objects.filter(key=PROVIDER_KEY).values_list("value", flat=True).first()
    return parse_provider(row)
