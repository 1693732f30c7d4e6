from django.contrib import admin

from dc_core.notifications.models import Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ("id", "recipient_type", "recipient_id", "kind", "channel", "sent_at")
    list_filter = ("recipient_type", "kind", "channel")
    search_fields = ("id", "recipient_id", "message")
    readonly_fields = ("created_at", "updated_at")
