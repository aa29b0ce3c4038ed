"""
Registry of the reminder modules.

All three modules run the same engine; they differ only in where
candidates come from and how the summary is labelled.
"""

from dataclasses import dataclass

from .exceptions import UnknownModuleError
from .models import ReminderModule
from .services import sources


@dataclass(frozen=True)
class TableColumns:
    subject: str
    detail: str
    type: str
    facility: str = "Facility"
    date: str = "Due date"
    days: str = "Days"


@dataclass(frozen=True)
class ModuleDefinition:
    key: str
    label: str
    load_candidates: object
    columns: TableColumns
    empty_message: str = "Nothing to report."


MODULES = {
    ReminderModule.TRAININGS: ModuleDefinition(
        key=ReminderModule.TRAININGS.value,
        label="Trainings",
        load_candidates=sources.load_training_candidates,
        columns=TableColumns(subject="Employee", detail="E-mail", type="Training"),
        empty_message="No trainings to report.",
    ),
    ReminderModule.DEADLINES: ModuleDefinition(
        key=ReminderModule.DEADLINES.value,
        label="Technical deadlines",
        load_candidates=sources.load_deadline_candidates,
        columns=TableColumns(subject="Equipment", detail="Inv. number", type="Deadline type"),
        empty_message="No technical deadlines to report.",
    ),
    ReminderModule.MEDICAL: ModuleDefinition(
        key=ReminderModule.MEDICAL.value,
        label="Medical examinations",
        load_candidates=sources.load_medical_candidates,
        columns=TableColumns(subject="Employee", detail="E-mail", type="Examination type"),
        empty_message="No medical examinations to report.",
    ),
}


def get_module(key):
    try:
        return MODULES[ReminderModule(key)]
    except ValueError:
        raise UnknownModuleError(f"Unknown reminder module: {key!r}")


def module_keys():
    return [definition.key for definition in MODULES.values()]
