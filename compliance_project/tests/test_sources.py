"""Candidate loaders for technical deadlines and medical examinations."""

from datetime import date

import pytest
from django.core import mail

from records.models import (
    Deadline,
    DeadlineType,
    Equipment,
    MedicalExamination,
    MedicalExaminationType,
)
from reminders.models import ReminderTemplate
from reminders.services.engine import run_module
from reminders.services.sources import (
    load_deadline_candidates,
    load_medical_candidates,
    load_training_candidates,
)

from conftest import NOW, TODAY

pytestmark = pytest.mark.django_db


@pytest.fixture
def equipment(make_user):
    item = Equipment.objects.create(name="Boiler", inventory_number="INV-7", facility="Plant A")
    item.responsible_persons.add(make_user(username="technician"))
    return item


@pytest.fixture
def revision(db):
    return DeadlineType.objects.create(name="Pressure vessel revision")


def test_deadline_responsibles_include_the_equipment_owners(equipment, revision, make_user):
    manager = make_user(username="manager")
    deadline = Deadline.objects.create(
        equipment=equipment,
        deadline_type=revision,
        next_check_date=date(2025, 1, 20),
    )
    deadline.responsibles.add(manager)

    [candidate] = load_deadline_candidates(TODAY)

    assert candidate.subject_name == "Boiler"
    assert candidate.detail == "INV-7"
    assert candidate.facility == "Plant A"
    assert candidate.type_name == "Pressure vessel revision"
    assert candidate.subject_active
    assert set(candidate.responsible_ids) == {manager.pk, equipment.responsible_persons.get().pk}
    assert candidate.responsible_ids[0] == manager.pk


def test_decommissioned_equipment_is_not_active(equipment, revision):
    equipment.status = Equipment.Status.DECOMMISSIONED
    equipment.save()
    Deadline.objects.create(equipment=equipment, deadline_type=revision, next_check_date=date(2025, 1, 9))

    [candidate] = load_deadline_candidates(TODAY)
    assert not candidate.subject_active


def test_record_facility_beats_subject_facility(make_training, make_employee):
    employee = make_employee(facility="Head office", email="jana@example.com")
    make_training(date(2025, 2, 1), employee=employee, facility="Warehouse", remind_days_before=45)

    [candidate] = load_training_candidates(TODAY)

    assert candidate.facility == "Warehouse"
    assert candidate.detail == "jana@example.com"
    assert candidate.remind_days_before == 45


def test_medical_candidates(make_employee):
    exam_type = MedicalExaminationType.objects.create(name="Periodic check-up")
    employee = make_employee(first_name="Petr", last_name="Svoboda")
    MedicalExamination.objects.create(
        employee=employee,
        examination_type=exam_type,
        next_examination_date=date(2025, 1, 15),
    )

    [candidate] = load_medical_candidates(TODAY)

    assert candidate.subject_name == "Petr Svoboda"
    assert candidate.type_name == "Periodic check-up"
    assert candidate.target_date == date(2025, 1, 15)


def test_deadline_module_end_to_end(equipment, revision):
    ReminderTemplate.objects.create(
        module="deadlines",
        name="Deadlines",
        email_subject="{totalCount} deadline(s), {expiredCount} overdue",
        email_body="See below.",
        remind_days_before=14,
    )
    Deadline.objects.create(equipment=equipment, deadline_type=revision, next_check_date=date(2025, 1, 3))
    Deadline.objects.create(equipment=equipment, deadline_type=revision, next_check_date=date(2025, 1, 15))
    Deadline.objects.create(equipment=equipment, deadline_type=revision, next_check_date=date(2025, 3, 1))

    result = run_module("deadlines", now=NOW)

    assert result.success
    assert result.results[0]["itemsCount"] == 2
    sent = mail.outbox[0]
    assert sent.subject == "2 deadline(s), 1 overdue"
    assert sent.bcc == ["technician@example.com"]
    assert "Inv. number" in sent.alternatives[0][0]
