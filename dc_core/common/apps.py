# dc_core/common/apps.py
from django.apps import AppConfig


class CommonConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "dc_core.common"

    def __init__(self, app_name, app_module):
        super().__init__(app_name, app_module)
        from dc_core.common.events import EventBus

        # Process-level bus owned by the app registry; services take it by injection.
        self.event_bus = EventBus()
