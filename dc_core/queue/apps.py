from django.apps import AppConfig


class QueueConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "dc_core.queue"
    verbose_name = "Treatment queue"
