from django.db import models
from django.conf import settings
from django.utils import timezone


class ReminderModule(models.TextChoices):
    TRAININGS = "trainings", "Trainings"
    DEADLINES = "deadlines", "Technical deadlines"
    MEDICAL = "medical", "Medical examinations"


# =====================================================
# SYSTEM SETTINGS (KEY / JSON VALUE STORE)
# =====================================================

class SystemSetting(models.Model):
    """
    Raw configuration blobs edited from the admin UI.
    Never read directly by the engine: reminders.config turns
    them into validated, immutable structs once per run.
    """

    key = models.CharField(max_length=100, unique=True)
    value = models.JSONField(default=dict, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["key"]

    def __str__(self):
        return self.key


# =====================================================
# REMINDER TEMPLATE
# =====================================================

class ReminderTemplateQuerySet(models.QuerySet):

    def active_for(self, module):
        # Ordering decides which template is the default one
        return (
            self.filter(module=module, is_active=True)
            .prefetch_related("target_users")
            .order_by("created_at", "id")
        )


class ReminderTemplate(models.Model):
    """
    Subject/body text with placeholders plus a default reminder window.
    The first active template of a module is its default.
    """

    module = models.CharField(
        max_length=20,
        choices=ReminderModule.choices,
        db_index=True,
    )
    name = models.CharField(max_length=150)

    email_subject = models.CharField(
        max_length=255,
        help_text="Placeholders: {totalCount}, {expiringCount}, {expiredCount}, {reportDate}",
    )
    email_body = models.TextField(
        help_text="Placeholders: {totalCount}, {expiringCount}, {expiredCount}, {reportDate}",
    )

    remind_days_before = models.PositiveIntegerField(
        default=30,
        help_text="Default reminder window (days before the target date)",
    )
    repeat_interval_days = models.PositiveIntegerField(null=True, blank=True)

    target_users = models.ManyToManyField(
        settings.AUTH_USER_MODEL,
        blank=True,
        related_name="reminder_templates",
        help_text="Static recipients used when nothing more specific is configured",
    )

    is_active = models.BooleanField(default=True, db_index=True)
    created_at = models.DateTimeField(default=timezone.now)

    objects = ReminderTemplateQuerySet.as_manager()

    class Meta:
        ordering = ["module", "created_at", "id"]

    def __str__(self):
        return f"{self.get_module_display()} | {self.name}"


# =====================================================
# REMINDER RUN (ONE INVOCATION OF THE ENGINE)
# =====================================================

class ReminderRun(models.Model):

    class Status(models.TextChoices):
        RUNNING = "running", "Running"
        SUCCESS = "success", "Success"
        FAILED = "failed", "Failed"
        SKIPPED = "skipped", "Skipped"

    module = models.CharField(
        max_length=20,
        choices=ReminderModule.choices,
        db_index=True,
    )
    period_key = models.CharField(max_length=10, db_index=True)
    triggered_by = models.CharField(max_length=100, default="cron")
    is_test = models.BooleanField(default=False)

    status = models.CharField(
        max_length=10,
        choices=Status.choices,
        default=Status.RUNNING,
        db_index=True,
    )
    emails_sent = models.PositiveIntegerField(default=0)
    emails_failed = models.PositiveIntegerField(default=0)

    message = models.CharField(max_length=255, blank=True)
    error_message = models.TextField(blank=True)
    error_details = models.JSONField(null=True, blank=True)

    started_at = models.DateTimeField(default=timezone.now, db_index=True)
    ended_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-started_at"]
        indexes = [
            models.Index(fields=["module", "period_key"], name="rem_run_module_period_idx"),
        ]

    def __str__(self):
        return f"{self.module} | {self.period_key} | {self.status}"

    @property
    def is_finished(self):
        return self.ended_at is not None

    def finish(self, status, *, emails_sent=0, emails_failed=0,
               message="", error_message="", error_details=None):
        """Close the run. A run is written exactly once at completion."""
        if self.is_finished:
            raise ValueError(f"Reminder run {self.pk} is already finished")

        self.status = status
        self.emails_sent = emails_sent
        self.emails_failed = emails_failed
        self.message = message[:255]
        self.error_message = error_message
        self.error_details = error_details
        self.ended_at = timezone.now()
        self.save(update_fields=[
            "status",
            "emails_sent",
            "emails_failed",
            "message",
            "error_message",
            "error_details",
            "ended_at",
        ])


# =====================================================
# REMINDER LOG (APPEND-ONLY AUDIT)
# =====================================================

class ReminderLog(models.Model):
    """
    One row per send attempt. Also the source of truth for the
    idempotency gate: any non-test row closes the period.
    """

    class Status(models.TextChoices):
        SENT = "sent", "Sent"
        FAILED = "failed", "Failed"

    module = models.CharField(
        max_length=20,
        choices=ReminderModule.choices,
        db_index=True,
    )
    run = models.ForeignKey(
        ReminderRun,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="logs",
    )
    period_key = models.CharField(max_length=10, db_index=True)
    is_test = models.BooleanField(default=False, db_index=True)

    template_id = models.PositiveIntegerField(null=True, blank=True)
    template_name = models.CharField(max_length=150, blank=True)

    recipient_emails = models.JSONField(default=list)
    delivery_mode = models.CharField(max_length=3, default="bcc")

    email_subject = models.CharField(max_length=255)
    email_body = models.TextField()
    items_count = models.PositiveIntegerField(default=0)

    status = models.CharField(
        max_length=10,
        choices=Status.choices,
        db_index=True,
    )
    provider = models.CharField(max_length=50, blank=True)
    error_message = models.TextField(blank=True)

    created_at = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(
                fields=["module", "period_key", "is_test", "status"],
                name="rem_log_period_gate_idx",
            ),
        ]

    def __str__(self):
        return f"{self.module} | {self.period_key} | {self.status}"

    def save(self, *args, **kwargs):
        if self.pk is not None:
            raise ValueError("Reminder log entries are append-only")
        super().save(*args, **kwargs)
