from django.contrib import admin

from dc_core.appointments.models import Appointment


@admin.register(Appointment)
class AppointmentAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "patient",
        "dentist",
        "start_time",
        "end_time",
        "status",
        "created_at",
    )
    list_filter = ("status",)
    search_fields = ("id", "patient__first_name", "patient__last_name", "dentist__last_name")
    readonly_fields = ("created_at", "updated_at")
    date_hierarchy = "start_time"
