from __future__ import annotations

import logging
from typing import Iterable, List
from uuid import UUID

from django.core.exceptions import ObjectDoesNotExist
from django.db import transaction
from django.utils import timezone

from dc_core.appointments.models import Appointment
from dc_core.notifications.models import (
    Notification,
    NotificationChannel,
    NotificationKind,
    RecipientType,
)
from dc_core.patients.models import Patient
from dc_core.staff.models import Staff

logger = logging.getLogger(__name__)


class NotificationService:
    UPDATABLE_FIELDS = {"recipient_id", "recipient_type", "message", "channel", "kind"}

    @staticmethod
    def _ensure_recipient(recipient_id: UUID, recipient_type: str) -> None:
        if recipient_type == RecipientType.PATIENT:
            if not Patient.objects.filter(id=recipient_id).exists():
                raise Patient.DoesNotExist("Patient not found")
        elif not Staff.objects.filter(id=recipient_id).exists():
            raise Staff.DoesNotExist("Staff member not found")

    @staticmethod
    @transaction.atomic
    def create_notification(
        *,
        recipient_id: UUID,
        recipient_type: str,
        message: str,
        channel: str = NotificationChannel.PUSH,
        kind: str = NotificationKind.GENERAL,
    ) -> Notification:
        NotificationService._ensure_recipient(recipient_id, recipient_type)

        notification = Notification.objects.create(
            recipient_id=recipient_id,
            recipient_type=recipient_type,
            message=message,
            channel=channel,
            kind=kind,
            sent_at=timezone.now(),
        )
        logger.info(
            "Notification %s sent to %s %s via %s",
            notification.id,
            recipient_type.lower(),
            recipient_id,
            channel,
        )
        return notification

    @staticmethod
    @transaction.atomic
    def delete_notification(*, notification_id: UUID) -> None:
        Notification.objects.get(id=notification_id).delete()

    @staticmethod
    @transaction.atomic
    def update_notification(*, notification_id: UUID, data: dict) -> Notification:
        notification = Notification.objects.select_for_update().get(id=notification_id)
        updates = {k: v for k, v in (data or {}).items() if k in NotificationService.UPDATABLE_FIELDS}

        recipient_id = updates.get("recipient_id", notification.recipient_id)
        recipient_type = updates.get("recipient_type", notification.recipient_type)
        if {"recipient_id", "recipient_type"} & updates.keys():
            NotificationService._ensure_recipient(recipient_id, recipient_type)

        for k, v in updates.items():
            setattr(notification, k, v)
        notification.save()

        logger.info("Notification %s updated (%s)", notification.id, ", ".join(sorted(updates)))
        return notification

    # -------------------------
    # Composed sends
    # -------------------------
    @staticmethod
    def send_appointment_reminder(
        *,
        appointment_id: UUID,
        channel: str = NotificationChannel.EMAIL,
    ) -> Notification:
        appointment = Appointment.objects.select_related("dentist").filter(id=appointment_id).first()
        if appointment is None:
            raise Appointment.DoesNotExist("Appointment not found")

        start = timezone.localtime(appointment.start_time)
        with_dentist = ""
        if appointment.dentist is not None:
            with_dentist = f" with Dr. {appointment.dentist.first_name} {appointment.dentist.last_name}"

        return NotificationService.create_notification(
            recipient_id=appointment.patient_id,
            recipient_type=RecipientType.PATIENT,
            message=(
                f"Reminder: You have an appointment scheduled for "
                f"{start:%Y-%m-%d} at {start:%H:%M}{with_dentist}."
            ),
            channel=channel,
            kind=NotificationKind.APPOINTMENT,
        )

    @staticmethod
    def send_staff_notification(
        *,
        staff_id: UUID,
        message: str,
        channel: str = NotificationChannel.EMAIL,
    ) -> Notification:
        return NotificationService.create_notification(
            recipient_id=staff_id,
            recipient_type=RecipientType.STAFF,
            message=message,
            channel=channel,
        )

    @staticmethod
    def bulk_send(*, items: Iterable[dict]) -> List[dict]:
        """
        Send each item on its own; an unknown recipient fails that item only.
        Returns one {"notification", "error"} result per item, in order.
        """
        results = []
        for item in items:
            try:
                notification = NotificationService.create_notification(**item)
            except ObjectDoesNotExist as e:
                results.append({"notification": None, "error": str(e)})
            else:
                results.append({"notification": notification, "error": None})

        sent = sum(1 for r in results if r["notification"] is not None)
        logger.info("Bulk send: %s of %s notifications sent", sent, len(results))
        return results
