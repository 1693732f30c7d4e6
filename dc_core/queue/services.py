# dc_core/queue/services.py

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional
from uuid import UUID

from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.utils import timezone

from dc_core.appointments.models import Appointment
from dc_core.common.events import EventBus, get_event_bus
from dc_core.patients.models import Patient
from dc_core.queue.models import ACTIVE_QUEUE_STATUSES, QueueEntry, QueueStatus
from dc_core.staff.models import Staff

logger = logging.getLogger(__name__)


class AlreadyQueued(Exception):
    def __init__(self, message: str = "Patient is already in queue"):
        super().__init__(message)


class QueueService:
    """
    Treatment queue write-model.

    Notes:
    - A patient has at most one WAITING/IN_TREATMENT entry. The service checks first
      and the partial unique constraint catches the concurrent insert that slips past.
    - Status moves are permissive (any -> any) except where they would break the rule above.
    """

    UPDATABLE_FIELDS = {"assigned_staff_id", "appointment_id", "check_in_time", "notes"}

    @staticmethod
    def _bus(bus: Optional[EventBus]) -> EventBus:
        return bus if bus is not None else get_event_bus()

    @staticmethod
    def _ensure_staff(staff_id: Optional[UUID]) -> None:
        if staff_id is not None and not Staff.objects.filter(id=staff_id).exists():
            raise Staff.DoesNotExist("Staff member not found.")

    @staticmethod
    def _ensure_appointment(appointment_id: Optional[UUID], patient_id: UUID) -> None:
        if appointment_id is None:
            return
        owner = Appointment.objects.filter(id=appointment_id).values_list("patient_id", flat=True).first()
        if owner is None:
            raise Appointment.DoesNotExist("Appointment not found.")
        if owner != patient_id:
            raise ValidationError({"appointment_id": "Appointment belongs to a different patient."})

    @staticmethod
    def _save_active(entry: QueueEntry, **save_kwargs) -> None:
        # Savepoint so a constraint hit leaves the outer transaction usable.
        try:
            with transaction.atomic():
                entry.save(**save_kwargs)
        except IntegrityError:
            logger.warning("Concurrent active queue entry for patient %s", entry.patient_id)
            raise AlreadyQueued()

    @staticmethod
    def _payload(entry: QueueEntry, **extra) -> dict:
        payload = {
            "entry_id": str(entry.id),
            "patient_id": str(entry.patient_id),
            "assigned_staff_id": str(entry.assigned_staff_id) if entry.assigned_staff_id else None,
            "status": entry.status,
        }
        payload.update(extra)
        return payload

    @staticmethod
    @transaction.atomic
    def enqueue(
        *,
        patient_id: UUID,
        assigned_staff_id: Optional[UUID] = None,
        appointment_id: Optional[UUID] = None,
        check_in_time: Optional[datetime] = None,
        notes: str = "",
        bus: Optional[EventBus] = None,
    ) -> QueueEntry:
        if not Patient.objects.filter(id=patient_id).exists():
            raise Patient.DoesNotExist("Patient not found.")
        QueueService._ensure_staff(assigned_staff_id)
        QueueService._ensure_appointment(appointment_id, patient_id)

        if QueueEntry.objects.filter(patient_id=patient_id, status__in=ACTIVE_QUEUE_STATUSES).exists():
            logger.warning("Patient %s is already in queue", patient_id)
            raise AlreadyQueued()

        entry = QueueEntry(
            patient_id=patient_id,
            assigned_staff_id=assigned_staff_id,
            appointment_id=appointment_id,
            check_in_time=check_in_time or timezone.now(),
            notes=notes or "",
            status=QueueStatus.WAITING,
        )
        QueueService._save_active(entry, force_insert=True)

        logger.info("Patient %s checked in (queue entry %s)", patient_id, entry.id)
        QueueService._bus(bus).publish(
            "queue.enqueued",
            QueueService._payload(entry, check_in_time=entry.check_in_time.isoformat()),
        )
        return entry

    @staticmethod
    @transaction.atomic
    def set_status(
        *,
        entry_id: UUID,
        status: str,
        bus: Optional[EventBus] = None,
    ) -> QueueEntry:
        entry = QueueEntry.objects.select_for_update().get(id=entry_id)

        # Idempotent no-op
        if entry.status == status:
            return entry

        previous = entry.status
        now = timezone.now()

        if status in ACTIVE_QUEUE_STATUSES and previous not in ACTIVE_QUEUE_STATUSES:
            clash = (
                QueueEntry.objects.filter(patient_id=entry.patient_id, status__in=ACTIVE_QUEUE_STATUSES)
                .exclude(id=entry.id)
                .exists()
            )
            if clash:
                raise AlreadyQueued()

        entry.status = status
        if status == QueueStatus.IN_TREATMENT:
            entry.started_at = now
        elif status in (QueueStatus.COMPLETED, QueueStatus.NO_SHOW):
            entry.completed_at = now
        if status in ACTIVE_QUEUE_STATUSES:
            # reopened entries are no longer finished
            entry.completed_at = None

        QueueService._save_active(entry)

        logger.info("Queue entry %s status %s -> %s", entry.id, previous, status)
        QueueService._bus(bus).publish(
            "queue.status_changed",
            QueueService._payload(entry, previous_status=previous),
        )
        return entry

    @staticmethod
    @transaction.atomic
    def update_entry(*, entry_id: UUID, data: dict) -> QueueEntry:
        entry = QueueEntry.objects.select_for_update().get(id=entry_id)
        updates = {k: v for k, v in (data or {}).items() if k in QueueService.UPDATABLE_FIELDS}

        if "assigned_staff_id" in updates:
            QueueService._ensure_staff(updates["assigned_staff_id"])
        if "appointment_id" in updates:
            QueueService._ensure_appointment(updates["appointment_id"], entry.patient_id)

        for k, v in updates.items():
            setattr(entry, k, "" if k == "notes" and v is None else v)
        entry.save()

        logger.info("Queue entry %s updated (%s)", entry.id, ", ".join(sorted(updates)))
        return entry

    @staticmethod
    def assign_staff(*, entry_id: UUID, staff_id: Optional[UUID]) -> QueueEntry:
        if staff_id is not None and not Staff.objects.filter(id=staff_id, is_active=True).exists():
            if Staff.objects.filter(id=staff_id).exists():
                raise ValidationError({"staff_id": "Staff member is inactive."})
            raise Staff.DoesNotExist("Staff member not found.")
        return QueueService.update_entry(entry_id=entry_id, data={"assigned_staff_id": staff_id})

    @staticmethod
    @transaction.atomic
    def dequeue(*, entry_id: UUID, bus: Optional[EventBus] = None) -> None:
        entry = QueueEntry.objects.get(id=entry_id)
        payload = QueueService._payload(entry)
        entry.delete()

        logger.info("Queue entry %s removed", entry_id)
        QueueService._bus(bus).publish("queue.dequeued", payload)
