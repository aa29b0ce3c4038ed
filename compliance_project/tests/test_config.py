"""Parsing of the stored reminder settings."""

import pytest

from reminders.config import (
    DEFAULT_DAYS_BEFORE,
    load_run_config,
    parse_days,
    parse_frequency,
    parse_provider,
    parse_recipients,
    parse_schedule,
    parse_template_override,
    recipients_key,
    template_key,
)
from reminders.exceptions import ReminderConfigError

from conftest import set_setting


@pytest.mark.django_db
def test_defaults_without_any_setting():
    config = load_run_config("trainings")

    assert config.module == "trainings"
    assert config.frequency.type == "weekly"
    assert config.frequency.enabled
    assert config.schedule.skip_weekends
    assert config.days.days_before == DEFAULT_DAYS_BEFORE
    assert config.recipients.user_ids == ()
    assert config.recipients.delivery_mode == "bcc"
    assert not config.provider.uses_smtp_override
    assert config.template_override is None


@pytest.mark.django_db
def test_module_specific_keys():
    set_setting(recipients_key("medical"), {"user_ids": [3, "4", 3], "delivery_mode": "to"})
    set_setting(template_key("medical"), {"subject": "S {totalCount}", "body": "B"})

    config = load_run_config("medical")
    assert config.recipients.user_ids == (3, 4)
    assert config.recipients.delivery_mode == "to"
    assert config.template_override.subject == "S {totalCount}"

    other = load_run_config("trainings")
    assert other.recipients.user_ids == ()
    assert other.template_override is None


@pytest.mark.django_db
def test_invalid_blob_names_the_key():
    set_setting("reminder_days", {"days_before": "soon"})

    with pytest.raises(ReminderConfigError) as exc_info:
        load_run_config("deadlines")

    assert exc_info.value.key == "reminder_days"
    assert "Invalid setting 'reminder_days'" in str(exc_info.value)


def test_days_are_deduplicated_and_descending():
    assert parse_days({"days_before": [7, 30, "14", 7]}).days_before == (30, 14, 7)


@pytest.mark.parametrize(
    "raw",
    [
        {"days_before": []},
        {"days_before": [7, None]},
        {"days_before": [-1]},
        {"days_before": [True]},
        "30,14,7",
    ],
)
def test_invalid_days(raw):
    with pytest.raises(ReminderConfigError):
        parse_days(raw)


def test_frequency_validation():
    assert parse_frequency({"type": "daily", "start_time": "06:30"}).type == "daily"

    with pytest.raises(ReminderConfigError):
        parse_frequency({"type": "hourly"})
    with pytest.raises(ReminderConfigError):
        parse_frequency({"start_time": "25:00"})
    with pytest.raises(ReminderConfigError):
        parse_frequency({"timezone": "Mars/Olympus"})
    with pytest.raises(ReminderConfigError):
        parse_frequency({"enabled": "yes"})


def test_schedule_flags():
    schedule = parse_schedule({"enabled": False, "skip_weekends": False})
    assert not schedule.enabled
    assert not schedule.skip_weekends


def test_recipient_validation():
    with pytest.raises(ReminderConfigError):
        parse_recipients("trainings", {"user_ids": [0]})
    with pytest.raises(ReminderConfigError):
        parse_recipients("trainings", {"user_ids": [""]})
    with pytest.raises(ReminderConfigError):
        parse_recipients("trainings", {"delivery_mode": "fax"})


def test_template_override_needs_both_parts():
    assert parse_template_override("trainings", {}) is None
    assert parse_template_override("trainings", {"subject": " ", "body": ""}) is None
    with pytest.raises(ReminderConfigError):
        parse_template_override("trainings", {"subject": "Only a subject"})


def test_provider_override_needs_a_sender():
    with pytest.raises(ReminderConfigError):
        parse_provider({"smtp_host": "smtp.example.com"})
    with pytest.raises(ReminderConfigError):
        parse_provider({"smtp_tls_mode": "ssl3"})

    provider = parse_provider({
        "smtp_host": "smtp.example.com",
        "smtp_port": "465",
        "smtp_from_email": "alerts@example.com",
        "smtp_tls_mode": "smtps",
    })
    assert provider.smtp_port == 465
    assert provider.sender_address == "alerts@example.com"
    assert "smtp_password" not in repr(provider)
