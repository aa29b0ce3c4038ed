import json
import logging

from django.core.exceptions import ValidationError
from django.core.validators import validate_email
from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_POST

from .auth import admin_token_required, trigger_auth_required
from .config import load_provider_config
from .exceptions import ReminderConfigError, ReminderError, UnknownModuleError
from .services.delivery import send_test_email
from .services.engine import ReminderEngine, Trigger

logger = logging.getLogger(__name__)


def _read_body(request):
    """Optional JSON body; anything unreadable counts as empty."""
    if not request.body:
        return {}
    try:
        data = json.loads(request.body)
    except (ValueError, UnicodeDecodeError):
        return {}
    return data if isinstance(data, dict) else {}


def _engine_or_404(module):
    try:
        return ReminderEngine(module), None
    except UnknownModuleError as exc:
        return None, JsonResponse({"error": str(exc)}, status=404)


# ============================================================
# RUN (POST)
# ============================================================

@csrf_exempt
@require_POST
@trigger_auth_required
def run_reminders(request, module):
    engine, error_response = _engine_or_404(module)
    if error_response:
        return error_response

    body = _read_body(request)
    triggered_by = body.get("triggered_by")
    trigger = Trigger.create(
        request.trigger_principal.source,
        triggered_by if isinstance(triggered_by, str) else None,
        test_mode=body.get("test_mode") is True,
    )

    result = engine.run(trigger)

    status = 500 if result.is_failure and result.emails_failed == 0 else 200
    return JsonResponse(result.as_dict(), status=status)


# ============================================================
# DRY RUN (GET)
# ============================================================

@require_GET
@trigger_auth_required
def preview_reminders(request, module):
    engine, error_response = _engine_or_404(module)
    if error_response:
        return error_response

    try:
        preview = engine.preview()
    except ReminderError as exc:
        logger.error("Preview of %s reminders failed: %s", module, exc)
        return JsonResponse({"success": False, "error": str(exc)}, status=500)

    return JsonResponse({"success": True, **preview})


# ============================================================
# PROVIDER CHECK (POST, ADMIN ONLY)
# ============================================================

@csrf_exempt
@require_POST
@admin_token_required
def test_email(request):
    email = _read_body(request).get("email")
    if not isinstance(email, str) or not email.strip():
        return JsonResponse({"error": "Email is required"}, status=400)

    email = email.strip()
    try:
        validate_email(email)
    except ValidationError:
        return JsonResponse({"error": "Invalid email address"}, status=400)

    try:
        provider = load_provider_config()
    except ReminderConfigError as exc:
        return JsonResponse({"success": False, "error": str(exc)}, status=500)

    result, diagnostics = send_test_email(email, provider)

    data = {
        "success": result.success,
        "provider": result.provider,
        "diagnostics": diagnostics,
    }
    if result.error:
        data["error"] = result.error
    return JsonResponse(data)
