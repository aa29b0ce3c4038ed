from django.db import migrations

DEFAULT_TEMPLATES = {
    "trainings": (
        "Training summary - {reportDate}",
        "Good day,\n\n"
        "the following trainings require attention.\n\n"
        "Total: {totalCount}\n"
        "- Expiring soon: {expiringCount}\n"
        "- Expired: {expiredCount}",
    ),
    "deadlines": (
        "Technical deadlines summary - {reportDate}",
        "Good day,\n\n"
        "the following technical deadlines require attention.\n\n"
        "Total: {totalCount}\n"
        "- Due soon: {expiringCount}\n"
        "- Overdue: {expiredCount}",
    ),
    "medical": (
        "Medical examinations summary - {reportDate}",
        "Good day,\n\n"
        "the following medical examinations require attention.\n\n"
        "Total: {totalCount}\n"
        "- Expiring soon: {expiringCount}\n"
        "- Expired: {expiredCount}",
    ),
}


def create_default_templates(apps, schema_editor):
    ReminderTemplate = apps.get_model("reminders", "ReminderTemplate")
    for module, (subject, body) in DEFAULT_TEMPLATES.items():
        if ReminderTemplate.objects.filter(module=module).exists():
            continue
        ReminderTemplate.objects.create(
            module=module,
            name="Summary",
            email_subject=subject,
            email_body=body,
            remind_days_before=30,
        )


def remove_default_templates(apps, schema_editor):
    ReminderTemplate = apps.get_model("reminders", "ReminderTemplate")
    ReminderTemplate.objects.filter(name="Summary").delete()


class Migration(migrations.Migration):

    dependencies = [
        ("reminders", "0001_initial"),
    ]

    operations = [
        migrations.RunPython(create_default_templates, remove_default_templates),
    ]
