from django.contrib import admin

from .models import (
    Employee,
    Equipment,
    TrainingType,
    DeadlineType,
    MedicalExaminationType,
    Training,
    Deadline,
    MedicalExamination,
)


# ============================================================
# SUBJECTS
# ============================================================

@admin.register(Employee)
class EmployeeAdmin(admin.ModelAdmin):
    list_display = ("last_name", "first_name", "email", "facility", "is_active", "terminated_at")
    list_filter = ("is_active", "facility")
    search_fields = ("first_name", "last_name", "email")


@admin.register(Equipment)
class EquipmentAdmin(admin.ModelAdmin):
    list_display = ("name", "inventory_number", "facility", "status")
    list_filter = ("status", "facility")
    search_fields = ("name", "inventory_number")
    filter_horizontal = ("responsible_persons",)


admin.site.register(TrainingType)
admin.site.register(DeadlineType)
admin.site.register(MedicalExaminationType)


# ============================================================
# DUE-DATE RECORDS
# ============================================================

class ComplianceRecordAdmin(admin.ModelAdmin):
    list_filter = ("is_active", "facility")
    filter_horizontal = ("responsibles",)
    list_per_page = 50

    @admin.action(description="Deactivate selected records")
    def deactivate(self, request, queryset):
        queryset.update(is_active=False)

    actions = ("deactivate",)


@admin.register(Training)
class TrainingAdmin(ComplianceRecordAdmin):
    list_display = ("employee", "training_type", "next_training_date", "facility", "is_active")
    search_fields = ("employee__first_name", "employee__last_name", "training_type__name")
    date_hierarchy = "next_training_date"


@admin.register(Deadline)
class DeadlineAdmin(ComplianceRecordAdmin):
    list_display = ("equipment", "deadline_type", "next_check_date", "facility", "is_active")
    search_fields = ("equipment__name", "equipment__inventory_number", "deadline_type__name")
    date_hierarchy = "next_check_date"


@admin.register(MedicalExamination)
class MedicalExaminationAdmin(ComplianceRecordAdmin):
    list_display = ("employee", "examination_type", "next_examination_date", "facility", "is_active")
    search_fields = ("employee__first_name", "employee__last_name", "examination_type__name")
    date_hierarchy = "next_examination_date"
