import os

from django.apps import AppConfig


def is_serving_process():
    """False in the runserver autoreloader parent, which never serves requests."""
    return os.environ.get("RUN_MAIN") == "true"


class RemindersConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "reminders"
    verbose_name = "Compliance reminders"

    def ready(self):
        if not is_serving_process():
            return

        from .scheduler import start_scheduler
        start_scheduler()
