from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import User, ApiToken


# ============================================================
# USER ADMIN
# ============================================================

@admin.register(User)
class UserAdmin(BaseUserAdmin):
    ordering = ("username",)

    list_display = (
        "username",
        "email",
        "first_name",
        "last_name",
        "position_title",
        "login_role",
        "is_active",
    )

    list_filter = (
        "login_role",
        "is_active",
        "is_staff",
    )

    search_fields = (
        "username",
        "email",
        "first_name",
        "last_name",
    )

    fieldsets = BaseUserAdmin.fieldsets + (
        ("Work Information", {
            "fields": (
                "position_title",
                "login_role",
            )
        }),
    )


# ============================================================
# API TOKENS
# ============================================================

@admin.register(ApiToken)
class ApiTokenAdmin(admin.ModelAdmin):
    list_display = ("user", "label", "is_active", "created_at", "last_used_at")
    list_filter = ("is_active",)
    search_fields = ("user__username", "label")
    readonly_fields = ("key", "created_at", "last_used_at")
    autocomplete_fields = ("user",)
