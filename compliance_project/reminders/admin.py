from django.contrib import admin
from django.utils.html import format_html

from .models import ReminderLog, ReminderRun, ReminderTemplate, SystemSetting


STATUS_COLORS = {
    ReminderRun.Status.RUNNING: "#2563eb",    # blue
    ReminderRun.Status.SUCCESS: "#16a34a",    # green
    ReminderRun.Status.FAILED: "#dc2626",     # red
    ReminderRun.Status.SKIPPED: "#6b7280",    # gray
    ReminderLog.Status.SENT: "#16a34a",
}


def colored_status(obj):
    color = STATUS_COLORS.get(obj.status, "#000000")
    return format_html(
        '<span style="color:{}; font-weight:600;">{}</span>',
        color,
        obj.get_status_display(),
    )


colored_status.short_description = "Status"


class ReadOnlyAdmin(admin.ModelAdmin):
    """Audit tables are written by the engine only."""

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


# =====================================================
# TEMPLATES
# =====================================================

@admin.register(ReminderTemplate)
class ReminderTemplateAdmin(admin.ModelAdmin):
    list_display = (
        "name",
        "module",
        "remind_days_before",
        "is_active",
        "created_at",
    )
    list_filter = ("module", "is_active")
    search_fields = ("name", "email_subject")
    filter_horizontal = ("target_users",)

    fieldsets = (
        ("Template", {
            "fields": ("module", "name", "is_active"),
        }),
        ("Content", {
            "fields": ("email_subject", "email_body"),
        }),
        ("Schedule", {
            "fields": ("remind_days_before", "repeat_interval_days"),
        }),
        ("Recipients", {
            "fields": ("target_users",),
        }),
    )


# =====================================================
# SETTINGS
# =====================================================

@admin.register(SystemSetting)
class SystemSettingAdmin(admin.ModelAdmin):
    list_display = ("key", "updated_at")
    search_fields = ("key",)
    readonly_fields = ("updated_at",)


# =====================================================
# RUNS
# =====================================================

class ReminderLogInline(admin.TabularInline):
    model = ReminderLog
    extra = 0
    can_delete = False
    fields = ("status", "provider", "recipient_emails", "email_subject", "error_message")
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(ReminderRun)
class ReminderRunAdmin(ReadOnlyAdmin):
    list_display = (
        "id",
        "module",
        "period_key",
        "triggered_by",
        "is_test",
        colored_status,
        "emails_sent",
        "emails_failed",
        "started_at",
        "ended_at",
    )
    list_filter = ("module", "status", "is_test")
    search_fields = ("period_key", "triggered_by", "error_message")
    ordering = ("-started_at",)
    list_per_page = 25
    inlines = (ReminderLogInline,)


# =====================================================
# AUDIT LOG
# =====================================================

@admin.register(ReminderLog)
class ReminderLogAdmin(ReadOnlyAdmin):
    list_display = (
        "id",
        "module",
        "period_key",
        "is_test",
        colored_status,
        "delivery_mode",
        "provider",
        "items_count",
        "created_at",
    )
    list_filter = ("module", "status", "is_test", "delivery_mode")
    search_fields = ("email_subject", "error_message", "period_key")
    ordering = ("-created_at",)
    list_per_page = 25
