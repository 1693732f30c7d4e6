from django.contrib import admin

from dc_core.patients.models import Patient


@admin.register(Patient)
class PatientAdmin(admin.ModelAdmin):
    list_display = (
        "first_name",
        "last_name",
        "gender",
        "phone_number",
        "email",
        "created_at",
    )
    list_filter = ("gender", "blood_type", "city")
    search_fields = ("first_name", "last_name", "phone_number", "email")
    readonly_fields = ("created_at", "updated_at")
    ordering = ("-created_at",)
