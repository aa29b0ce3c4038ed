"""
Trigger authorization: the scheduler's shared secret, or a bearer
token belonging to an active admin.
"""

import logging
from dataclasses import dataclass
from functools import wraps

from django.conf import settings
from django.http import JsonResponse
from django.utils.crypto import constant_time_compare

from accounts.models import ApiToken

logger = logging.getLogger(__name__)

CRON_SECRET_HEADER = "X-Cron-Secret"


@dataclass(frozen=True)
class TriggerPrincipal:
    source: str          # "cron" | "manual"
    user: object = None


def _cron_principal(request):
    expected = settings.REMINDER_CRON_SECRET
    presented = request.headers.get(CRON_SECRET_HEADER, "")
    if expected and presented and constant_time_compare(presented, expected):
        return TriggerPrincipal(source="cron")
    return None


def _bearer_principal(request):
    header = request.headers.get("Authorization", "")
    if not header.startswith("Bearer "):
        return None

    key = header[len("Bearer "):].strip()
    if not key:
        return None

    token = (
        ApiToken.objects
        .select_related("user")
        .filter(key=key, is_active=True)
        .first()
    )
    if token is None:
        return None

    user = token.user
    if not user.is_active or not user.is_admin_role:
        logger.warning("Reminder trigger refused for non-admin user %s", user.pk)
        return None

    token.touch()
    return TriggerPrincipal(source="manual", user=user)


def authorize_trigger(request):
    """Return the calling principal, or None when the caller is not allowed."""
    return _cron_principal(request) or _bearer_principal(request)


def trigger_auth_required(view):
    @wraps(view)
    def wrapper(request, *args, **kwargs):
        principal = authorize_trigger(request)
        if principal is None:
            logger.info("Unauthorized reminder trigger attempt on %s", request.path)
            return JsonResponse(
                {"error": "Unauthorized - Admin access or CRON secret required"},
                status=401,
            )
        request.trigger_principal = principal
        return view(request, *args, **kwargs)

    return wrapper


def admin_token_required(view):
    """Like trigger_auth_required, but the cron secret is not enough."""
    @wraps(view)
    def wrapper(request, *args, **kwargs):
        principal = _bearer_principal(request)
        if principal is None:
            logger.info("Unauthorized admin request on %s", request.path)
            return JsonResponse(
                {"error": "Unauthorized - Admin access required"},
                status=401,
            )
        request.trigger_principal = principal
        return view(request, *args, **kwargs)

    return wrapper
