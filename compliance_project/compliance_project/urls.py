from django.contrib import admin
from django.http import JsonResponse
from django.urls import path, include


def root_health(request):
    return JsonResponse({"status": "ok", "service": "compliance-reminders"})


urlpatterns = [
    # ROOT
    path("", root_health, name="root"),

    # DJANGO ADMIN (STAFF ONLY)
    path("django/admin/", admin.site.urls),

    # REMINDER TRIGGERS
    path("api/reminders/", include("reminders.urls")),
]
