from django.contrib import admin

from dc_core.staff.models import Staff


@admin.register(Staff)
class StaffAdmin(admin.ModelAdmin):
    list_display = (
        "first_name",
        "last_name",
        "email",
        "role",
        "is_active",
        "created_at",
    )
    list_filter = ("role", "is_active")
    search_fields = ("first_name", "last_name", "email", "phone_number")
    readonly_fields = ("created_at", "updated_at")
    ordering = ("last_name", "first_name")
