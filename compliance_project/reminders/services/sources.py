"""
Candidate loaders: read-only queries against the records app.

Each loader returns CandidateItem objects so the rest of the engine
never touches the record models directly.
"""

import logging

from django.db import DatabaseError

from records.models import Deadline, MedicalExamination, Training

from ..exceptions import ReminderDataError
from .items import CandidateItem

logger = logging.getLogger(__name__)


def _ids(related_manager):
    return tuple(u.pk for u in related_manager.all())


def _fetch(label, queryset):
    try:
        return list(queryset)
    except DatabaseError as exc:
        logger.exception("Failed to fetch %s", label)
        raise ReminderDataError(f"Failed to fetch {label}: {exc}") from exc


# ============================================================
# TRAININGS
# ============================================================

def load_training_candidates(today):
    trainings = _fetch(
        "trainings",
        Training.objects.pending()
        .select_related("employee", "training_type")
        .prefetch_related("responsibles")
        .order_by("next_training_date"),
    )

    return [
        CandidateItem(
            id=t.pk,
            target_date=t.next_training_date,
            subject_name=t.employee.full_name,
            type_name=t.training_type.name,
            facility=t.facility or t.employee.facility,
            detail=t.employee.email,
            template_id=t.reminder_template_id,
            remind_days_before=t.remind_days_before,
            responsible_ids=_ids(t.responsibles),
            subject_active=t.employee.is_employed(today),
        )
        for t in trainings
    ]


# ============================================================
# TECHNICAL DEADLINES
# ============================================================

def load_deadline_candidates(today):
    deadlines = _fetch(
        "deadlines",
        Deadline.objects.pending()
        .select_related("equipment", "deadline_type")
        .prefetch_related("responsibles", "equipment__responsible_persons")
        .order_by("next_check_date"),
    )

    candidates = []
    for d in deadlines:
        responsible_ids = _ids(d.responsibles)
        for user_id in _ids(d.equipment.responsible_persons):
            if user_id not in responsible_ids:
                responsible_ids += (user_id,)

        candidates.append(
            CandidateItem(
                id=d.pk,
                target_date=d.next_check_date,
                subject_name=d.equipment.name,
                type_name=d.deadline_type.name,
                facility=d.facility or d.equipment.facility,
                detail=d.equipment.inventory_number,
                template_id=d.reminder_template_id,
                remind_days_before=d.remind_days_before,
                responsible_ids=responsible_ids,
                subject_active=d.equipment.status == d.equipment.Status.ACTIVE,
            )
        )
    return candidates


# ============================================================
# MEDICAL EXAMINATIONS
# ============================================================

def load_medical_candidates(today):
    examinations = _fetch(
        "medical examinations",
        MedicalExamination.objects.pending()
        .select_related("employee", "examination_type")
        .prefetch_related("responsibles")
        .order_by("next_examination_date"),
    )

    return [
        CandidateItem(
            id=e.pk,
            target_date=e.next_examination_date,
            subject_name=e.employee.full_name,
            type_name=e.examination_type.name,
            facility=e.facility or e.employee.facility,
            detail=e.employee.email,
            template_id=e.reminder_template_id,
            remind_days_before=e.remind_days_before,
            responsible_ids=_ids(e.responsibles),
            subject_active=e.employee.is_employed(today),
        )
        for e in examinations
    ]
