# dc_core/notifications/subscribers.py
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List

from django.utils import timezone
from django.utils.dateparse import parse_datetime

from dc_core.appointments.models import ACTIVE_STATUSES
from dc_core.common.events import EventBus
from dc_core.notifications.models import NotificationChannel, NotificationKind, RecipientType
from dc_core.notifications.services import NotificationService

logger = logging.getLogger(__name__)


def notify_appointment_scheduled(payload: Dict[str, Any]) -> None:
    if payload.get("status") not in ACTIVE_STATUSES:
        return

    start = parse_datetime(payload["start_time"])
    when = timezone.localtime(start).strftime("%Y-%m-%d %H:%M")

    # Runs inside the booking transaction; create_notification opens its own savepoint.
    NotificationService.create_notification(
        recipient_id=payload["patient_id"],
        recipient_type=RecipientType.PATIENT,
        message=f"Appointment scheduled for {when}",
        channel=NotificationChannel.SMS,
        kind=NotificationKind.APPOINTMENT,
    )


def notify_treatment_completed(payload: Dict[str, Any]) -> None:
    if payload.get("status") != "COMPLETED":
        return

    NotificationService.create_notification(
        recipient_id=payload["patient_id"],
        recipient_type=RecipientType.PATIENT,
        message="Treatment completed",
        channel=NotificationChannel.PUSH,
        kind=NotificationKind.QUEUE,
    )


SUBSCRIPTIONS = (
    ("appointment.scheduled", notify_appointment_scheduled),
    ("queue.status_changed", notify_treatment_completed),
)


def register(bus: EventBus) -> List[Callable[[], None]]:
    """
    Attach the notification handlers to `bus`; returns the disposers.
    """
    disposers = [bus.subscribe(event_name, handler) for event_name, handler in SUBSCRIPTIONS]
    logger.debug("Notification subscribers registered (%d)", len(disposers))
    return disposers
