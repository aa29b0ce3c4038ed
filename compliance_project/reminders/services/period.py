"""
Notification period keys.

The key only feeds the idempotency gate. Which records are due is
decided per record by the eligibility selector, never by the period.
"""

from datetime import datetime, timedelta

from django.utils import timezone


def local_date(frequency, now=None):
    """Calendar date of `now` in the frequency's timezone."""
    now = now or timezone.now()
    if isinstance(now, datetime):
        if timezone.is_naive(now):
            return now.date()
        return timezone.localtime(now, frequency.tzinfo).date()
    return now


def week_start(day):
    # ISO weekday: Monday=1 .. Sunday=7
    return day - timedelta(days=day.isoweekday() - 1)


def period_key(frequency, now=None):
    """
    "YYYY-MM-DD" of the current day for daily reminders,
    otherwise of the Monday opening the current ISO week.
    """
    today = local_date(frequency, now)
    if frequency.type == "daily":
        return today.isoformat()
    return week_start(today).isoformat()


def is_weekend(day):
    return day.isoweekday() >= 6
