"""
reminders/management/commands/run_reminders.py

Scheduled entry point (cron, APScheduler) for the reminder engine.

Safe to run more than once per period: each module's idempotency
gate turns repeated runs into "Already sent for this period".
"""

import json

from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone

from reminders.exceptions import ReminderError
from reminders.modules import module_keys
from reminders.services.engine import ReminderEngine, Trigger


class Command(BaseCommand):
    help = "Send reminder summaries for trainings, technical deadlines and medical examinations"

    def add_arguments(self, parser):
        parser.add_argument(
            "--module",
            action="append",
            choices=module_keys(),
            dest="modules",
            help="Module to run (repeatable). Defaults to all modules.",
        )
        parser.add_argument(
            "--test",
            action="store_true",
            help="Test mode: bypass the period gate and simulate delivery",
        )
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Print what would be sent without recording or sending anything",
        )
        parser.add_argument(
            "--triggered-by",
            default="cron",
            help="Free-text trigger label stored on the run",
        )

    def handle(self, *args, **options):
        now = timezone.now()
        modules = options["modules"] or module_keys()

        self.stdout.write(
            self.style.NOTICE(
                f"[{now:%Y-%m-%d %H:%M:%S}] Starting reminder runs: {', '.join(modules)}"
            )
        )

        if options["dry_run"]:
            for module in modules:
                try:
                    preview = ReminderEngine(module).preview(now=now)
                except ReminderError as exc:
                    raise CommandError(f"{module}: {exc}")
                self.stdout.write(json.dumps(preview, indent=2, ensure_ascii=False))
            return

        trigger = Trigger.create(
            "cron",
            options["triggered_by"],
            test_mode=options["test"],
        )

        failures = 0
        for module in modules:
            result = ReminderEngine(module).run(trigger, now=now)
            line = (
                f"{module}: {result.status} "
                f"(sent={result.emails_sent}, failed={result.emails_failed})"
            )
            note = result.error or result.info or result.message
            if note:
                line = f"{line} - {note}"

            if result.is_failure:
                failures += 1
                self.stdout.write(self.style.ERROR(line))
            else:
                self.stdout.write(self.style.SUCCESS(line))

        self.stdout.write(
            self.style.NOTICE(
                f"[{timezone.now():%Y-%m-%d %H:%M:%S}] Completed: "
                f"{len(modules) - failures} ok, {failures} failed"
            )
        )
        if failures:
            raise CommandError(f"{failures} reminder run(s) failed")
