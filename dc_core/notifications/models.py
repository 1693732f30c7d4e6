from __future__ import annotations

from django.db import models
from django.utils import timezone

from dc_core.common.models import UUIDModel


class RecipientType(models.TextChoices):
    PATIENT = "PATIENT", "Patient"
    STAFF = "STAFF", "Staff"


class NotificationChannel(models.TextChoices):
    EMAIL = "EMAIL", "Email"
    SMS = "SMS", "SMS"
    PUSH = "PUSH", "Push"


class NotificationKind(models.TextChoices):
    APPOINTMENT = "APPOINTMENT", "Appointment"
    QUEUE = "QUEUE", "Queue"
    GENERAL = "GENERAL", "General"


class Notification(UUIDModel):
    """
    Delivery record for a patient or staff member.
    The recipient link stays loose (UUID + type) so either directory can be addressed.
    """
    recipient_id = models.UUIDField(db_index=True)
    recipient_type = models.CharField(max_length=16, choices=RecipientType.choices)

    message = models.TextField()
    channel = models.CharField(
        max_length=16,
        choices=NotificationChannel.choices,
        default=NotificationChannel.PUSH,
        db_index=True,
    )
    kind = models.CharField(
        max_length=16,
        choices=NotificationKind.choices,
        default=NotificationKind.GENERAL,
        db_index=True,
    )
    sent_at = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        db_table = "notifications_notification"
        indexes = [
            models.Index(fields=["recipient_type", "recipient_id", "sent_at"]),
        ]

    def __str__(self) -> str:
        return f"{self.recipient_type}:{self.recipient_id} [{self.kind}/{self.channel}]"
