"""
Compliance records (trainings, technical deadlines, medical examinations).

These tables are owned by the CRUD layer. The reminder engine only
reads them through the `pending()` querysets below.
"""

from django.conf import settings
from django.db import models
from django.utils import timezone


# =====================================================
# SUBJECTS
# =====================================================

class Employee(models.Model):
    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100)
    email = models.EmailField(blank=True)
    facility = models.CharField(max_length=150, blank=True)

    is_active = models.BooleanField(default=True)
    terminated_at = models.DateField(null=True, blank=True)

    linked_user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="employee",
    )

    class Meta:
        ordering = ["last_name", "first_name"]

    def __str__(self):
        return self.full_name

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}".strip()

    def is_employed(self, today=None):
        """False once the employee is deactivated or the termination date passed."""
        if not self.is_active:
            return False
        if self.terminated_at is None:
            return True
        today = today or timezone.localdate()
        return self.terminated_at > today


class Equipment(models.Model):

    class Status(models.TextChoices):
        ACTIVE = "active", "Active"
        INACTIVE = "inactive", "Inactive"
        DECOMMISSIONED = "decommissioned", "Decommissioned"

    name = models.CharField(max_length=200)
    inventory_number = models.CharField(max_length=100, blank=True)
    facility = models.CharField(max_length=150, blank=True)
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.ACTIVE,
        db_index=True,
    )

    responsible_persons = models.ManyToManyField(
        settings.AUTH_USER_MODEL,
        blank=True,
        related_name="responsible_equipment",
    )

    class Meta:
        ordering = ["name"]

    def __str__(self):
        if self.inventory_number:
            return f"{self.name} ({self.inventory_number})"
        return self.name


# =====================================================
# TYPES
# =====================================================

class TrainingType(models.Model):
    name = models.CharField(max_length=200, unique=True)

    def __str__(self):
        return self.name


class DeadlineType(models.Model):
    name = models.CharField(max_length=200, unique=True)

    def __str__(self):
        return self.name


class MedicalExaminationType(models.Model):
    name = models.CharField(max_length=200, unique=True)

    def __str__(self):
        return self.name


# =====================================================
# DUE-DATE BEARING RECORDS
# =====================================================

class ComplianceRecordQuerySet(models.QuerySet):

    def pending(self):
        """Active, non-deleted records (the reminder candidates)."""
        return self.filter(is_active=True, deleted_at__isnull=True)


class ComplianceRecord(models.Model):
    """
    Shared columns of every record that carries a target date.
    """

    facility = models.CharField(max_length=150, blank=True)

    reminder_template = models.ForeignKey(
        "reminders.ReminderTemplate",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
        help_text="Per-record template; the module default applies when empty",
    )
    remind_days_before = models.PositiveIntegerField(
        null=True,
        blank=True,
        help_text="Per-record reminder window overriding the template default",
    )

    responsibles = models.ManyToManyField(
        settings.AUTH_USER_MODEL,
        blank=True,
        related_name="%(class)s_responsibilities",
    )

    is_active = models.BooleanField(default=True, db_index=True)
    deleted_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(default=timezone.now)

    objects = ComplianceRecordQuerySet.as_manager()

    class Meta:
        abstract = True

    def soft_delete(self):
        self.deleted_at = timezone.now()
        self.save(update_fields=["deleted_at"])


class Training(ComplianceRecord):
    employee = models.ForeignKey(
        Employee,
        on_delete=models.CASCADE,
        related_name="trainings",
    )
    training_type = models.ForeignKey(
        TrainingType,
        on_delete=models.PROTECT,
        related_name="trainings",
    )
    last_training_date = models.DateField(null=True, blank=True)
    next_training_date = models.DateField(db_index=True)

    class Meta:
        ordering = ["next_training_date"]

    def __str__(self):
        return f"{self.training_type} - {self.employee} ({self.next_training_date})"


class Deadline(ComplianceRecord):
    equipment = models.ForeignKey(
        Equipment,
        on_delete=models.CASCADE,
        related_name="deadlines",
    )
    deadline_type = models.ForeignKey(
        DeadlineType,
        on_delete=models.PROTECT,
        related_name="deadlines",
    )
    last_check_date = models.DateField(null=True, blank=True)
    next_check_date = models.DateField(db_index=True)
    requester = models.CharField(max_length=200, blank=True)

    class Meta:
        ordering = ["next_check_date"]

    def __str__(self):
        return f"{self.deadline_type} - {self.equipment} ({self.next_check_date})"


class MedicalExamination(ComplianceRecord):
    employee = models.ForeignKey(
        Employee,
        on_delete=models.CASCADE,
        related_name="medical_examinations",
    )
    examination_type = models.ForeignKey(
        MedicalExaminationType,
        on_delete=models.PROTECT,
        related_name="examinations",
    )
    last_examination_date = models.DateField(null=True, blank=True)
    next_examination_date = models.DateField(db_index=True)

    class Meta:
        ordering = ["next_examination_date"]

    def __str__(self):
        return f"{self.examination_type} - {self.employee} ({self.next_examination_date})"
