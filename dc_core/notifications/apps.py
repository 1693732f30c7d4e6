# dc_core/notifications/apps.py
from __future__ import annotations

from django.apps import AppConfig


class NotificationsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "dc_core.notifications"

    def ready(self) -> None:
        from dc_core.common.events import get_event_bus
        from dc_core.notifications.subscribers import register

        self.disposers = register(get_event_bus())
