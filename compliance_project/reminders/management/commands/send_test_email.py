"""
reminders/management/commands/send_test_email.py

Sends one message through the configured e-mail provider so the
SMTP settings can be checked without running a reminder module.
"""

from django.core.exceptions import ValidationError
from django.core.management.base import BaseCommand, CommandError
from django.core.validators import validate_email

from reminders.config import load_provider_config
from reminders.exceptions import ReminderConfigError
from reminders.services.delivery import send_test_email


class Command(BaseCommand):
    help = "Send a test e-mail through the configured mail provider"

    def add_arguments(self, parser):
        parser.add_argument("email", help="Recipient address")

    def handle(self, *args, **options):
        email = options["email"].strip()
        try:
            validate_email(email)
        except ValidationError:
            raise CommandError(f"Invalid email address: {email!r}")

        try:
            provider = load_provider_config()
        except ReminderConfigError as exc:
            raise CommandError(str(exc))

        result, diagnostics = send_test_email(email, provider)

        for key, value in diagnostics.items():
            self.stdout.write(f"  {key}: {value}")

        if not result.success:
            raise CommandError(f"Test e-mail via {result.provider} failed: {result.error}")

        self.stdout.write(self.style.SUCCESS(f"Test e-mail sent to {email} via {result.provider}"))
