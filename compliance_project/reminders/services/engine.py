"""
Reminder run orchestrator.

    gating -> idempotency check -> selecting -> resolving recipients
           -> rendering -> sending -> logging -> done

The engine never retries. Any non-test audit row closes the period,
so a failed send is retried by the next period's scheduled run.
"""

import logging
from dataclasses import dataclass, field

from django.db import DatabaseError
from django.utils import timezone

from ..config import load_run_config
from ..exceptions import ReminderConfigError, ReminderDataError
from ..models import ReminderRun, ReminderTemplate
from ..modules import get_module
from . import audit
from .delivery import deliver
from .eligibility import select_due_items
from .period import is_weekend, local_date, period_key
from .recipients import resolve_recipients
from .templating import count_items, format_date, render_message

logger = logging.getLogger(__name__)

MSG_DISABLED = "Reminders are disabled"
MSG_WEEKEND = "Skipped - weekend"
MSG_ALREADY_SENT = "Already sent for this period"
MSG_NO_ITEMS = "No items require attention"
INFO_NO_TEMPLATE = "No active reminder template configured"
INFO_NO_RECIPIENTS = "No recipients configured"
INFO_NO_VALID_EMAILS = "No valid recipient emails found"


# ============================================================
# TRIGGER / RESULT
# ============================================================

@dataclass(frozen=True)
class Trigger:
    source: str = "cron"          # cron | manual | test
    triggered_by: str = "cron"
    test_mode: bool = False

    @classmethod
    def create(cls, source, triggered_by=None, test_mode=False):
        label = (triggered_by or "").strip() or ("cron" if source == "cron" else "admin")
        if test_mode:
            label = "test" if label == "cron" else f"{label}_test"
            source = "test"
        return cls(source=source, triggered_by=label, test_mode=test_mode)


@dataclass
class RunResult:
    status: str
    success: bool
    emails_sent: int = 0
    emails_failed: int = 0
    message: str = None
    info: str = None
    error: str = None
    results: list = field(default_factory=list)
    run_id: int = None
    period_key: str = None

    @property
    def is_failure(self):
        return self.status == ReminderRun.Status.FAILED

    def as_dict(self):
        data = {
            "success": self.success,
            "status": self.status,
            "emailsSent": self.emails_sent,
            "emailsFailed": self.emails_failed,
        }
        optional = {
            "message": self.message,
            "info": self.info,
            "error": self.error,
            "runId": self.run_id,
            "periodKey": self.period_key,
        }
        data.update({k: v for k, v in optional.items() if v is not None})
        if self.results:
            data["results"] = self.results
        return data


def _skipped(period, run=None, message=None, info=None):
    if run is not None:
        run.finish(ReminderRun.Status.SKIPPED, message=message or info)
    return RunResult(
        status=ReminderRun.Status.SKIPPED,
        success=True,
        message=message,
        info=info,
        run_id=run.pk if run is not None else None,
        period_key=period,
    )


# ============================================================
# ENGINE
# ============================================================

class ReminderEngine:

    def __init__(self, module):
        self.definition = get_module(module)
        self.module = self.definition.key

    # --------------------------------------------------
    # SHARED STAGES
    # --------------------------------------------------
    def _load_templates(self):
        try:
            return list(ReminderTemplate.objects.active_for(self.module))
        except DatabaseError as exc:
            raise ReminderDataError(f"Failed to fetch reminder templates: {exc}") from exc

    def _select(self, config, today, templates):
        default_template = templates[0] if templates else None
        candidates = self.definition.load_candidates(today)
        due = select_due_items(
            candidates,
            config,
            today,
            templates={t.pk: t for t in templates},
            default_template=default_template,
        )
        logger.info(
            "%s: %s of %s candidate(s) due", self.module, len(due), len(candidates)
        )
        return due

    @staticmethod
    def _summary_template(config, default_template):
        """Subject/body source: module override first, then the default template."""
        if config.template_override is not None:
            return config.template_override.subject, config.template_override.body
        if default_template is not None:
            return default_template.email_subject, default_template.email_body
        return None

    def _render(self, texts, due, today, test_mode):
        subject, body = texts
        return render_message(
            subject,
            body,
            due,
            self.definition.columns,
            today,
            test_mode=test_mode,
            empty_message=self.definition.empty_message,
        )

    # --------------------------------------------------
    # RUN
    # --------------------------------------------------
    def run(self, trigger=None, now=None):
        trigger = trigger or Trigger()
        now = now or timezone.now()

        logger.info(
            "Starting %s reminder run: triggered_by=%s, test_mode=%s",
            self.module, trigger.triggered_by, trigger.test_mode,
        )

        try:
            config = load_run_config(self.module)
        except ReminderConfigError as exc:
            logger.error("%s: %s", self.module, exc)
            return RunResult(
                status=ReminderRun.Status.FAILED,
                success=False,
                error=str(exc),
            )

        today = local_date(config.frequency, now)
        period = period_key(config.frequency, now)

        # --------------------------------------------
        # SCHEDULE GATES (test runs go through)
        # --------------------------------------------
        if not trigger.test_mode:
            if not (config.schedule.enabled and config.frequency.enabled):
                logger.info("%s: %s", self.module, MSG_DISABLED)
                return _skipped(period, message=MSG_DISABLED)

            if config.schedule.skip_weekends and is_weekend(today):
                logger.info("%s: %s", self.module, MSG_WEEKEND)
                return _skipped(period, message=MSG_WEEKEND)

            if audit.already_sent(self.module, period):
                logger.info("%s: duplicate run for period %s, skipping", self.module, period)
                return _skipped(period, message=MSG_ALREADY_SENT)

        run = audit.open_run(self.module, period, trigger.triggered_by, trigger.test_mode)

        try:
            return self._dispatch(run, config, today, trigger.test_mode)
        except ReminderDataError as exc:
            logger.error("%s run %s aborted: %s", self.module, run.pk, exc)
            error = str(exc)
        except Exception as exc:
            logger.exception("%s run %s failed unexpectedly", self.module, run.pk)
            error = str(exc) or exc.__class__.__name__

        if not run.is_finished:
            run.finish(ReminderRun.Status.FAILED, error_message=error)
        return RunResult(
            status=ReminderRun.Status.FAILED,
            success=False,
            error=error,
            run_id=run.pk,
            period_key=period,
        )

    def _dispatch(self, run, config, today, test_mode):
        period = run.period_key

        templates = self._load_templates()
        default_template = templates[0] if templates else None

        texts = self._summary_template(config, default_template)
        if texts is None:
            logger.info("%s: %s", self.module, INFO_NO_TEMPLATE)
            return _skipped(period, run, info=INFO_NO_TEMPLATE)

        # --------------------------------------------
        # SELECTING
        # --------------------------------------------
        due = self._select(config, today, templates)
        if not due:
            logger.info("%s: %s", self.module, MSG_NO_ITEMS)
            return _skipped(period, run, message=MSG_NO_ITEMS)

        # --------------------------------------------
        # RESOLVING RECIPIENTS
        # --------------------------------------------
        recipients = resolve_recipients(due, config, default_template)
        if not recipients:
            info = INFO_NO_VALID_EMAILS if config.recipients.is_configured else INFO_NO_RECIPIENTS
            logger.info("%s: %s", self.module, info)
            return _skipped(period, run, info=info)

        # --------------------------------------------
        # RENDERING + SENDING
        # --------------------------------------------
        message = self._render(texts, due, today, test_mode)
        result = deliver(
            message,
            recipients.emails,
            recipients.delivery_mode,
            config.provider,
            test_mode=test_mode,
        )

        # --------------------------------------------
        # LOGGING
        # --------------------------------------------
        # The send already happened; its outcome is reported even when
        # the audit row cannot be written
        summary_template = None if config.template_override is not None else default_template
        audit_error = None
        try:
            audit.record_delivery(
                run,
                template=summary_template,
                recipients=recipients,
                message=message,
                result=result,
                items_count=len(due),
            )
        except DatabaseError as exc:
            logger.exception("%s run %s: delivery outcome could not be logged", self.module, run.pk)
            audit_error = f"Failed to write reminder log: {exc}"

        emails_sent = 1 if result.success else 0
        emails_failed = 0 if result.success else 1
        status = ReminderRun.Status.SUCCESS if result.success else ReminderRun.Status.FAILED

        run.finish(
            status,
            emails_sent=emails_sent,
            emails_failed=emails_failed,
            message=f"{len(due)} item(s) to {len(recipients.emails)} recipient(s)",
            error_message="\n".join(e for e in (result.error, audit_error) if e),
        )

        logger.info(
            "%s reminder run %s completed: %s sent, %s failed",
            self.module, run.pk, emails_sent, emails_failed,
        )

        return RunResult(
            status=status,
            success=result.success,
            emails_sent=emails_sent,
            emails_failed=emails_failed,
            error=result.error or None,
            info=audit_error,
            results=[{
                "template": summary_template.name if summary_template else "Summary",
                "itemsCount": len(due),
                "recipientCount": len(recipients.emails),
                "recipientSource": recipients.source,
                "deliveryMode": recipients.delivery_mode,
                "provider": result.provider,
                "success": result.success,
                "error": result.error or None,
            }],
            run_id=run.pk,
            period_key=period,
        )

    # --------------------------------------------------
    # DRY RUN
    # --------------------------------------------------
    def preview(self, now=None):
        """
        What a run would send right now: no gates, no run row,
        no audit entry, no delivery.
        """
        now = now or timezone.now()
        config = load_run_config(self.module)
        today = local_date(config.frequency, now)

        templates = self._load_templates()
        default_template = templates[0] if templates else None
        due = self._select(config, today, templates)
        recipients = resolve_recipients(due, config, default_template)
        texts = self._summary_template(config, default_template)
        message = self._render(texts, due, today, test_mode=False) if texts else None
        counts = count_items(due)

        return {
            "module": self.module,
            "periodKey": period_key(config.frequency, now),
            "alreadySent": audit.already_sent(self.module, period_key(config.frequency, now)),
            "totalCount": counts.total,
            "expiringCount": counts.expiring,
            "expiredCount": counts.expired,
            "items": [
                {
                    "id": d.item.id,
                    "subject": d.item.subject_name,
                    "type": d.item.type_name,
                    "targetDate": d.item.target_date.isoformat(),
                    "formattedDate": format_date(d.item.target_date),
                    "daysUntil": d.days_until,
                    "templateId": d.template_id,
                }
                for d in due
            ],
            "recipients": list(recipients.emails),
            "recipientSource": recipients.source,
            "deliveryMode": recipients.delivery_mode,
            "subject": message.subject if message else None,
            "body": message.body if message else None,
            "info": None if texts else INFO_NO_TEMPLATE,
        }


def run_module(module, trigger=None, now=None):
    return ReminderEngine(module).run(trigger, now=now)
