from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from django.conf import settings
from django.core.management import call_command
from django.core.management.base import CommandError
from django.utils import timezone
import logging

logger = logging.getLogger(__name__)

# ============================================================
# PROCESS-WIDE SCHEDULER
# Set once by start_scheduler()
# ============================================================
_scheduler = None


def parse_run_time(value):
    """'HH:MM' -> (hour, minute); falls back to 08:00."""
    try:
        hour, minute = (int(part) for part in value.split(":", 1))
    except (AttributeError, ValueError):
        logger.warning("Invalid REMINDER_RUN_TIME %r, using 08:00", value)
        return 8, 0
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        logger.warning("Invalid REMINDER_RUN_TIME %r, using 08:00", value)
        return 8, 0
    return hour, minute


def start_scheduler():
    """
    Register the daily reminder job and start the background scheduler.

    - No-op unless ENABLE_SCHEDULER is set
    - Returns the running scheduler on repeated calls
    - Single-process deployments only (each process would start its own)
    """
    global _scheduler

    # --------------------------------------------
    # DEV / PROD TOGGLE
    # --------------------------------------------
    if not getattr(settings, "ENABLE_SCHEDULER", False):
        logger.info("APScheduler disabled via settings (ENABLE_SCHEDULER=False)")
        return None

    # --------------------------------------------
    # SAFETY LOCK (NO DOUBLE START)
    # --------------------------------------------
    if _scheduler is not None:
        logger.info("APScheduler already running, skipping initialization")
        return _scheduler

    hour, minute = parse_run_time(settings.REMINDER_RUN_TIME)

    logger.info("Starting APScheduler...")

    _scheduler = BackgroundScheduler(
        timezone=settings.TIME_ZONE
    )

    # --------------------------------------------
    # SCHEDULE: DAILY AT REMINDER_RUN_TIME
    # Weekly modules rely on the period gate to send once per week
    # --------------------------------------------
    _scheduler.add_job(
        run_scheduled_reminders,
        trigger=CronTrigger(hour=hour, minute=minute, timezone=settings.TIME_ZONE),
        id="run_reminders",
        replace_existing=True,
        max_instances=1,      # Prevent overlapping runs
        coalesce=True,        # Merge missed runs if server was down
    )

    _scheduler.start()

    logger.info(
        "APScheduler started: reminders scheduled daily at %02d:%02d %s",
        hour, minute, settings.TIME_ZONE,
    )
    return _scheduler


def run_scheduled_reminders():
    """
    Wrapper job that calls the management command.
    Keeps all business logic out of the scheduler.
    """
    now = timezone.now()
    logger.info(f"Running scheduled reminders at {now:%Y-%m-%d %H:%M:%S}")

    try:
        call_command("run_reminders", triggered_by="cron")
    except CommandError as exc:
        # Already recorded on the failed runs; keep the scheduler alive
        logger.error("Scheduled reminder run finished with errors: %s", exc)
