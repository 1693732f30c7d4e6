from django.contrib import admin

from dc_core.queue.models import QueueEntry


@admin.register(QueueEntry)
class QueueEntryAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "patient",
        "assigned_staff",
        "status",
        "check_in_time",
        "started_at",
        "completed_at",
    )
    list_filter = ("status",)
    search_fields = ("id", "patient__first_name", "patient__last_name")
    readonly_fields = ("created_at", "updated_at")
