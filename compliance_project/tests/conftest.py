"""
Shared fixtures for the reminder tests.

Time is never read from the clock: tests pass `NOW` / `TODAY`
explicitly. Mail goes to the locmem backend (`mail.outbox`).
"""

from datetime import date, datetime
from zoneinfo import ZoneInfo

import pytest

from accounts.models import ApiToken, User
from records.models import Employee, Training, TrainingType
from reminders.config import (
    EmailProviderConfig,
    RecipientConfig,
    ReminderDays,
    ReminderFrequency,
    ReminderSchedule,
    RunConfig,
)
from reminders.models import ReminderTemplate, SystemSetting

PRAGUE = ZoneInfo("Europe/Prague")

# Wednesday; its ISO week opens on Monday 2025-01-06
NOW = datetime(2025, 1, 8, 9, 0, tzinfo=PRAGUE)
TODAY = date(2025, 1, 8)
WEEK_KEY = "2025-01-06"


def set_setting(key, value):
    SystemSetting.objects.update_or_create(key=key, defaults={"value": value})


def make_config(module="trainings", days_before=(30, 14, 7), user_ids=(),
                delivery_mode="bcc", **kwargs):
    return RunConfig(
        module=module,
        frequency=kwargs.pop("frequency", ReminderFrequency()),
        schedule=kwargs.pop("schedule", ReminderSchedule()),
        days=ReminderDays(days_before=tuple(days_before)),
        recipients=RecipientConfig(user_ids=tuple(user_ids), delivery_mode=delivery_mode),
        provider=kwargs.pop("provider", EmailProviderConfig()),
        **kwargs,
    )


# =============================================================================
# SETTINGS
# =============================================================================


@pytest.fixture(autouse=True)
def reminder_settings(settings):
    settings.TIME_ZONE = "Europe/Prague"
    settings.DEFAULT_FROM_EMAIL = "Compliance Reminders <noreply@example.com>"
    settings.EMAIL_BACKEND = "django.core.mail.backends.locmem.EmailBackend"
    settings.REMINDER_CRON_SECRET = "cron-secret"
    settings.REMINDER_DATE_FORMAT = "j. n. Y"
    settings.ENABLE_SCHEDULER = False
    return settings


# =============================================================================
# USERS
# =============================================================================


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(email=None, role=User.LoginRole.USER, is_active=True, **kwargs):
        counter["n"] += 1
        username = kwargs.pop("username", f"user{counter['n']}")
        return User.objects.create_user(
            username=username,
            email=f"{username}@example.com" if email is None else email,
            password="x",
            login_role=role,
            is_active=is_active,
            **kwargs,
        )

    return _make


@pytest.fixture
def admin_account(make_user):
    return make_user(username="boss", role=User.LoginRole.ADMIN)


@pytest.fixture
def admin_token(admin_account):
    return ApiToken.objects.create(user=admin_account, label="tests")


# =============================================================================
# REMINDER DATA
# =============================================================================


@pytest.fixture
def training_template(db):
    return ReminderTemplate.objects.create(
        module="trainings",
        name="Weekly summary",
        email_subject="Trainings {reportDate}: {totalCount} item(s)",
        email_body="Total: {totalCount}\nExpiring: {expiringCount}\nExpired: {expiredCount}",
        remind_days_before=30,
    )


@pytest.fixture
def training_type(db):
    return TrainingType.objects.create(name="Fire safety")


@pytest.fixture
def make_employee(db):
    def _make(first_name="Jana", last_name="Novakova", **kwargs):
        return Employee.objects.create(first_name=first_name, last_name=last_name, **kwargs)

    return _make


@pytest.fixture
def make_training(make_employee, training_type):
    def _make(next_date, employee=None, responsibles=(), **kwargs):
        training = Training.objects.create(
            employee=employee or make_employee(),
            training_type=training_type,
            next_training_date=next_date,
            **kwargs,
        )
        if responsibles:
            training.responsibles.set(responsibles)
        return training

    return _make
