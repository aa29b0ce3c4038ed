"""
Idempotency gate and audit trail.

A period is closed by the first non-test ReminderLog, sent or failed.
A failed send is retried by the next period, not the next trigger.
Two runs racing before either log write lands can both pass the
gate; that window is accepted rather than locked against.
"""

import logging

from ..models import ReminderLog, ReminderRun

logger = logging.getLogger(__name__)


def already_sent(module, period_key):
    return ReminderLog.objects.filter(
        module=module,
        period_key=period_key,
        is_test=False,
    ).exists()


def open_run(module, period_key, triggered_by, is_test):
    run = ReminderRun.objects.create(
        module=module,
        period_key=period_key,
        triggered_by=triggered_by[:100],
        is_test=is_test,
        status=ReminderRun.Status.RUNNING,
    )
    logger.info(
        "Opened reminder run %s (%s, period %s, triggered_by=%s, test=%s)",
        run.pk, module, period_key, triggered_by, is_test,
    )
    return run


def record_delivery(run, *, template, recipients, message, result, items_count):
    """Write the single audit row of a run that attempted a send."""
    return ReminderLog.objects.create(
        module=run.module,
        run=run,
        period_key=run.period_key,
        is_test=run.is_test,
        template_id=template.pk if template is not None else None,
        template_name=template.name if template is not None else "Summary",
        recipient_emails=list(recipients.emails),
        delivery_mode=recipients.delivery_mode,
        email_subject=message.subject[:255],
        email_body=message.body,
        items_count=items_count,
        status=ReminderLog.Status.SENT if result.success else ReminderLog.Status.FAILED,
        provider=result.provider,
        error_message=result.error,
    )
