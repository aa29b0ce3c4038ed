"""Trigger endpoints: authorization, status codes and request bodies."""

import json

import pytest
from django.core import mail
from django.urls import reverse

from accounts.models import ApiToken, User
from reminders.models import ReminderRun

from conftest import set_setting

pytestmark = pytest.mark.django_db


@pytest.fixture(autouse=True)
def any_day_of_the_week(db):
    # endpoints read the real clock
    set_setting("reminder_schedule", {"skip_weekends": False})


def run_url(module="trainings"):
    return reverse("reminders:run", kwargs={"module": module})


def preview_url(module="trainings"):
    return reverse("reminders:preview", kwargs={"module": module})


def bearer(token):
    return {"HTTP_AUTHORIZATION": f"Bearer {token.key}"}


CRON = {"HTTP_X_CRON_SECRET": "cron-secret"}


# =============================================================================
# AUTHORIZATION
# =============================================================================


def test_anonymous_is_rejected(client):
    response = client.post(run_url())

    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized - Admin access or CRON secret required"}
    assert ReminderRun.objects.count() == 0


def test_wrong_cron_secret_is_rejected(client):
    response = client.post(run_url(), HTTP_X_CRON_SECRET="guess")
    assert response.status_code == 401


def test_unset_cron_secret_never_matches(client, settings):
    settings.REMINDER_CRON_SECRET = ""
    response = client.post(run_url(), HTTP_X_CRON_SECRET="")
    assert response.status_code == 401


def test_cron_secret(client):
    response = client.post(run_url(), **CRON)

    assert response.status_code == 200
    assert response.json()["success"] is True
    assert ReminderRun.objects.get().triggered_by == "cron"


def test_admin_token(client, admin_token):
    response = client.post(run_url(), **bearer(admin_token))

    assert response.status_code == 200
    assert ReminderRun.objects.get().triggered_by == "admin"

    admin_token.refresh_from_db()
    assert admin_token.last_used_at is not None


def test_non_admin_token_is_rejected(client, make_user):
    token = ApiToken.objects.create(user=make_user(role=User.LoginRole.MANAGER))
    assert client.post(run_url(), **bearer(token)).status_code == 401


def test_revoked_token_is_rejected(client, admin_token):
    admin_token.is_active = False
    admin_token.save()
    assert client.post(run_url(), **bearer(admin_token)).status_code == 401


def test_deactivated_admin_is_rejected(client, admin_token):
    User.objects.filter(pk=admin_token.user_id).update(is_active=False)
    assert client.post(run_url(), **bearer(admin_token)).status_code == 401


# =============================================================================
# RUN
# =============================================================================


def test_only_post_runs(client):
    assert client.get(run_url(), **CRON).status_code == 405


def test_unknown_module(client):
    response = client.post(run_url("payroll"), **CRON)
    assert response.status_code == 404


def test_test_mode_body(client, admin_token):
    response = client.post(
        run_url("medical"),
        data=json.dumps({"triggered_by": "alice", "test_mode": True}),
        content_type="application/json",
        **bearer(admin_token),
    )

    assert response.status_code == 200
    run = ReminderRun.objects.get()
    assert run.module == "medical"
    assert run.is_test
    assert run.triggered_by == "alice_test"


def test_test_mode_must_be_a_real_boolean(client):
    client.post(
        run_url(),
        data=json.dumps({"test_mode": "yes"}),
        content_type="application/json",
        **CRON,
    )
    assert not ReminderRun.objects.get().is_test


def test_malformed_body_counts_as_empty(client):
    response = client.post(run_url(), data="{not json", content_type="application/json", **CRON)
    assert response.status_code == 200


def test_configuration_error_is_a_server_error(client):
    set_setting("reminder_days", {"days_before": []})

    response = client.post(run_url(), **CRON)

    assert response.status_code == 500
    body = response.json()
    assert body["success"] is False
    assert "reminder_days" in body["error"]


# =============================================================================
# PREVIEW
# =============================================================================


def test_preview(client, admin_token):
    response = client.get(preview_url("deadlines"), **bearer(admin_token))

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["module"] == "deadlines"
    assert body["items"] == []
    assert ReminderRun.objects.count() == 0


def test_preview_requires_authorization(client):
    assert client.get(preview_url()).status_code == 401


def test_preview_configuration_error(client):
    set_setting("reminder_frequency", {"timezone": "Nowhere/Else"})
    response = client.get(preview_url(), **CRON)
    assert response.status_code == 500


# =============================================================================
# PROVIDER CHECK
# =============================================================================


def post_test_email(client, payload, **headers):
    return client.post(
        reverse("reminders:test_email"),
        data=json.dumps(payload),
        content_type="application/json",
        **headers,
    )


def test_admin_sends_a_provider_test_email(client, admin_token):
    response = post_test_email(client, {"email": "ops@example.com"}, **bearer(admin_token))

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["provider"] == "locmem"
    assert body["diagnostics"]["provider"] == "locmem"
    assert len(mail.outbox) == 1
    assert mail.outbox[0].to == ["ops@example.com"]


def test_cron_secret_cannot_send_a_provider_test_email(client):
    response = post_test_email(client, {"email": "ops@example.com"}, **CRON)

    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized - Admin access required"}
    assert mail.outbox == []


def test_provider_test_email_rejects_non_admins(client, make_user):
    token = ApiToken.objects.create(user=make_user(role=User.LoginRole.MANAGER))
    response = post_test_email(client, {"email": "ops@example.com"}, **bearer(token))
    assert response.status_code == 401


@pytest.mark.parametrize("payload", [{}, {"email": ""}, {"email": "   "}, {"email": 42}])
def test_provider_test_email_requires_an_address(client, admin_token, payload):
    response = post_test_email(client, payload, **bearer(admin_token))

    assert response.status_code == 400
    assert response.json() == {"error": "Email is required"}


def test_provider_test_email_rejects_a_malformed_address(client, admin_token):
    response = post_test_email(client, {"email": "not-an-address"}, **bearer(admin_token))

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid email address"}
    assert mail.outbox == []
