import logging

from django.contrib.auth import get_user_model
from django.db import DatabaseError

from ..exceptions import ReminderDataError
from .items import Recipients

logger = logging.getLogger(__name__)

User = get_user_model()

SOURCE_CONFIG = "config"
SOURCE_RESPONSIBLES = "responsibles"
SOURCE_TEMPLATE = "template"
SOURCE_NONE = "none"


def unique_emails(emails):
    """Lower-case, drop blanks and duplicates, keep first-seen order."""
    seen = []
    for email in emails:
        email = (email or "").strip().lower()
        if email and email not in seen:
            seen.append(email)
    return tuple(seen)


def emails_for_users(user_ids):
    """
    Resolve directory entries to addresses, in the order the ids were
    given. Inactive users and users without an e-mail are dropped.
    """
    user_ids = list(dict.fromkeys(user_ids))
    if not user_ids:
        return (), ()

    try:
        rows = dict(
            User.objects
            .filter(pk__in=user_ids, is_active=True)
            .exclude(email="")
            .values_list("pk", "email")
        )
    except DatabaseError as exc:
        raise ReminderDataError(f"Failed to resolve recipients: {exc}") from exc

    unresolved = tuple(pk for pk in user_ids if pk not in rows)
    return unique_emails(rows[pk] for pk in user_ids if pk in rows), unresolved


def resolve_recipients(due_items, config, default_template=None):
    """
    Who receives the summary, first non-empty source wins:

    1. the module recipient setting (used exclusively when set),
    2. the responsible parties of the due items,
    3. the default template's static target users.
    """
    mode = config.recipients.delivery_mode

    if config.recipients.is_configured:
        emails, unresolved = emails_for_users(config.recipients.user_ids)
        if unresolved:
            logger.warning(
                "%s: %s configured recipient(s) could not be resolved: %s",
                config.module, len(unresolved), list(unresolved),
            )
        return Recipients(
            emails=emails,
            delivery_mode=mode,
            source=SOURCE_CONFIG if emails else SOURCE_NONE,
            unresolved_ids=unresolved,
        )

    responsible_ids = []
    for due in due_items:
        responsible_ids.extend(due.item.responsible_ids)

    emails, _ = emails_for_users(responsible_ids)
    if emails:
        return Recipients(emails=emails, delivery_mode=mode, source=SOURCE_RESPONSIBLES)

    if default_template is not None:
        target_ids = [u.pk for u in default_template.target_users.all()]
        emails, _ = emails_for_users(target_ids)
        if emails:
            return Recipients(emails=emails, delivery_mode=mode, source=SOURCE_TEMPLATE)

    return Recipients(delivery_mode=mode, source=SOURCE_NONE)
