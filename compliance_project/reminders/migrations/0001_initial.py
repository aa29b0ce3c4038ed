import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models

MODULE_CHOICES = [
    ("trainings", "Trainings"),
    ("deadlines", "Technical deadlines"),
    ("medical", "Medical examinations"),
]

PLACEHOLDER_HELP = "Placeholders: {totalCount}, {expiringCount}, {expiredCount}, {reportDate}"


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="SystemSetting",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("key", models.CharField(max_length=100, unique=True)),
                ("value", models.JSONField(blank=True, default=dict)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["key"],
            },
        ),
        migrations.CreateModel(
            name="ReminderTemplate",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("module", models.CharField(choices=MODULE_CHOICES, db_index=True, max_length=20)),
                ("name", models.CharField(max_length=150)),
                ("email_subject", models.CharField(help_text=PLACEHOLDER_HELP, max_length=255)),
                ("email_body", models.TextField(help_text=PLACEHOLDER_HELP)),
                ("remind_days_before", models.PositiveIntegerField(default=30, help_text="Default reminder window (days before the target date)")),
                ("repeat_interval_days", models.PositiveIntegerField(blank=True, null=True)),
                ("is_active", models.BooleanField(db_index=True, default=True)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("target_users", models.ManyToManyField(blank=True, help_text="Static recipients used when nothing more specific is configured", related_name="reminder_templates", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["module", "created_at", "id"],
            },
        ),
        migrations.CreateModel(
            name="ReminderRun",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("module", models.CharField(choices=MODULE_CHOICES, db_index=True, max_length=20)),
                ("period_key", models.CharField(db_index=True, max_length=10)),
                ("triggered_by", models.CharField(default="cron", max_length=100)),
                ("is_test", models.BooleanField(default=False)),
                ("status", models.CharField(choices=[("running", "Running"), ("success", "Success"), ("failed", "Failed"), ("skipped", "Skipped")], db_index=True, default="running", max_length=10)),
                ("emails_sent", models.PositiveIntegerField(default=0)),
                ("emails_failed", models.PositiveIntegerField(default=0)),
                ("message", models.CharField(blank=True, max_length=255)),
                ("error_message", models.TextField(blank=True)),
                ("error_details", models.JSONField(blank=True, null=True)),
                ("started_at", models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ("ended_at", models.DateTimeField(blank=True, null=True)),
            ],
            options={
                "ordering": ["-started_at"],
                "indexes": [models.Index(fields=["module", "period_key"], name="rem_run_module_period_idx")],
            },
        ),
        migrations.CreateModel(
            name="ReminderLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("module", models.CharField(choices=MODULE_CHOICES, db_index=True, max_length=20)),
                ("period_key", models.CharField(db_index=True, max_length=10)),
                ("is_test", models.BooleanField(db_index=True, default=False)),
                ("template_id", models.PositiveIntegerField(blank=True, null=True)),
                ("template_name", models.CharField(blank=True, max_length=150)),
                ("recipient_emails", models.JSONField(default=list)),
                ("delivery_mode", models.CharField(default="bcc", max_length=3)),
                ("email_subject", models.CharField(max_length=255)),
                ("email_body", models.TextField()),
                ("items_count", models.PositiveIntegerField(default=0)),
                ("status", models.CharField(choices=[("sent", "Sent"), ("failed", "Failed")], db_index=True, max_length=10)),
                ("provider", models.CharField(blank=True, max_length=50)),
                ("error_message", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ("run", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="logs", to="reminders.reminderrun")),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [models.Index(fields=["module", "period_key", "is_test", "status"], name="rem_log_period_gate_idx")],
            },
        ),
    ]
