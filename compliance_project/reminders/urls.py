from django.urls import path

from . import views

app_name = "reminders"

urlpatterns = [
    path("test-email/", views.test_email, name="test_email"),
    path("<str:module>/run/", views.run_reminders, name="run"),
    path("<str:module>/preview/", views.preview_reminders, name="preview"),
]
