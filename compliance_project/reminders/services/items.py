from dataclasses import dataclass, field
from datetime import date


@dataclass(frozen=True)
class CandidateItem:
    """A due-date bearing record as read from its source table."""

    id: int
    target_date: date
    subject_name: str
    type_name: str
    facility: str = ""
    detail: str = ""
    template_id: int = None
    remind_days_before: int = None
    responsible_ids: tuple = ()
    subject_active: bool = True


@dataclass(frozen=True)
class DueItem:
    """A candidate inside its reminder window, for one run only."""

    item: CandidateItem
    days_until: int
    template_id: int = None

    @property
    def is_overdue(self):
        return self.days_until < 0


@dataclass(frozen=True)
class Counts:
    total: int = 0
    expiring: int = 0
    expired: int = 0


@dataclass(frozen=True)
class Recipients:
    emails: tuple = ()
    delivery_mode: str = "bcc"
    source: str = "none"
    unresolved_ids: tuple = field(default=(), compare=False)

    def __bool__(self):
        return bool(self.emails)
