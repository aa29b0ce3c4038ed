import logging
import unicodedata
from dataclasses import dataclass
from datetime import datetime

from django.utils import timezone

from .items import DueItem

logger = logging.getLogger(__name__)


# ============================================================
# DATE ARITHMETIC
# ============================================================

def as_local_date(value):
    """Strip the time of day; aware datetimes are read in local time."""
    if isinstance(value, datetime):
        if timezone.is_aware(value):
            value = timezone.localtime(value)
        return value.date()
    return value


def days_until(target, today):
    """Signed whole days from `today` to `target` (negative = overdue)."""
    return (as_local_date(target) - as_local_date(today)).days


# ============================================================
# THRESHOLDS
# ============================================================

@dataclass(frozen=True)
class Threshold:
    offsets: tuple
    # True: anything up to the offset is due; False: only the exact milestone days
    window: bool = False


def resolve_offsets(item, template, days_config):
    """
    Reminder threshold for one item: the item's own window, else the
    template default window, else the global list of milestone days.
    """
    if item.remind_days_before is not None:
        return Threshold(offsets=(item.remind_days_before,), window=True)
    if template is not None and template.remind_days_before is not None:
        return Threshold(offsets=(template.remind_days_before,), window=True)
    return Threshold(offsets=tuple(days_config.days_before))


def is_due(days, threshold):
    if days < 0:
        return True
    if threshold.window:
        return any(days <= offset for offset in threshold.offsets)
    return days in threshold.offsets


def resolve_template(item, templates, default_template):
    """The item's own template when it is active, else the module default."""
    if item.template_id is not None and item.template_id in templates:
        return templates[item.template_id]
    return default_template


# ============================================================
# SORTING
# ============================================================

def collation_key(name):
    """
    Accent-insensitive, case-insensitive ordering key, so that
    "Čermák" sorts next to "Cermak" rather than after "Zeman".
    """
    decomposed = unicodedata.normalize("NFKD", name or "")
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return (base.casefold(), decomposed.casefold())


def sort_due_items(due_items):
    return sorted(
        due_items,
        key=lambda d: (d.days_until, collation_key(d.item.subject_name)),
    )


# ============================================================
# SELECTION
# ============================================================

def select_due_items(candidates, config, today, templates=None, default_template=None):
    """
    Filter candidates to the items inside their reminder window
    (or overdue), most urgent first.

    `templates` maps template id -> ReminderTemplate for per-item
    overrides; `default_template` applies to items without one.
    """
    templates = templates or {}
    due = []
    skipped_inactive = 0

    for item in candidates:
        if not item.subject_active:
            skipped_inactive += 1
            continue

        template = resolve_template(item, templates, default_template)
        days = days_until(item.target_date, today)

        if not is_due(days, resolve_offsets(item, template, config.days)):
            continue

        due.append(
            DueItem(
                item=item,
                days_until=days,
                template_id=template.pk if template is not None else None,
            )
        )

    if skipped_inactive:
        logger.debug("Ignored %s candidates with an inactive subject", skipped_inactive)

    return sort_due_items(due)
