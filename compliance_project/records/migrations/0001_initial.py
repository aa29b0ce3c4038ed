import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models

TEMPLATE_HELP = "Per-record template; the module default applies when empty"
DAYS_HELP = "Per-record reminder window overriding the template default"


def record_fields(related_prefix):
    return [
        ("facility", models.CharField(blank=True, max_length=150)),
        ("remind_days_before", models.PositiveIntegerField(blank=True, help_text=DAYS_HELP, null=True)),
        ("is_active", models.BooleanField(db_index=True, default=True)),
        ("deleted_at", models.DateTimeField(blank=True, null=True)),
        ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
        ("reminder_template", models.ForeignKey(blank=True, help_text=TEMPLATE_HELP, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to="reminders.remindertemplate")),
        ("responsibles", models.ManyToManyField(blank=True, related_name=f"{related_prefix}_responsibilities", to=settings.AUTH_USER_MODEL)),
    ]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("reminders", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Employee",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("first_name", models.CharField(max_length=100)),
                ("last_name", models.CharField(max_length=100)),
                ("email", models.EmailField(blank=True, max_length=254)),
                ("facility", models.CharField(blank=True, max_length=150)),
                ("is_active", models.BooleanField(default=True)),
                ("terminated_at", models.DateField(blank=True, null=True)),
                ("linked_user", models.OneToOneField(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="employee", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["last_name", "first_name"],
            },
        ),
        migrations.CreateModel(
            name="Equipment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=200)),
                ("inventory_number", models.CharField(blank=True, max_length=100)),
                ("facility", models.CharField(blank=True, max_length=150)),
                ("status", models.CharField(choices=[("active", "Active"), ("inactive", "Inactive"), ("decommissioned", "Decommissioned")], db_index=True, default="active", max_length=20)),
                ("responsible_persons", models.ManyToManyField(blank=True, related_name="responsible_equipment", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="TrainingType",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=200, unique=True)),
            ],
        ),
        migrations.CreateModel(
            name="DeadlineType",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=200, unique=True)),
            ],
        ),
        migrations.CreateModel(
            name="MedicalExaminationType",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=200, unique=True)),
            ],
        ),
        migrations.CreateModel(
            name="Training",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                *record_fields("training"),
                ("last_training_date", models.DateField(blank=True, null=True)),
                ("next_training_date", models.DateField(db_index=True)),
                ("employee", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="trainings", to="records.employee")),
                ("training_type", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="trainings", to="records.trainingtype")),
            ],
            options={
                "ordering": ["next_training_date"],
            },
        ),
        migrations.CreateModel(
            name="Deadline",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                *record_fields("deadline"),
                ("last_check_date", models.DateField(blank=True, null=True)),
                ("next_check_date", models.DateField(db_index=True)),
                ("requester", models.CharField(blank=True, max_length=200)),
                ("equipment", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="deadlines", to="records.equipment")),
                ("deadline_type", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="deadlines", to="records.deadlinetype")),
            ],
            options={
                "ordering": ["next_check_date"],
            },
        ),
        migrations.CreateModel(
            name="MedicalExamination",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                *record_fields("medicalexamination"),
                ("last_examination_date", models.DateField(blank=True, null=True)),
                ("next_examination_date", models.DateField(db_index=True)),
                ("employee", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="medical_examinations", to="records.employee")),
                ("examination_type", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="examinations", to="records.medicalexaminationtype")),
            ],
            options={
                "ordering": ["next_examination_date"],
            },
        ),
    ]
