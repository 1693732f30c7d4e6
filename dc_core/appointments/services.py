# dc_core/appointments/services.py

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional
from uuid import UUID

from django.core.exceptions import ValidationError
from django.db import transaction

from dc_core.appointments.models import (
    ACTIVE_STATUSES,
    TERMINAL_STATUSES,
    Appointment,
    AppointmentStatus,
)
from dc_core.appointments.selectors import find_conflicts
from dc_core.common.events import EventBus, get_event_bus
from dc_core.patients.models import Patient
from dc_core.staff.models import Staff, StaffRole

logger = logging.getLogger(__name__)


class AppointmentConflict(Exception):
    """The dentist already has an active appointment overlapping the requested slot."""

    def __init__(self, conflicting_ids=()):
        self.conflicting_ids = [str(i) for i in conflicting_ids]
        super().__init__(AppointmentService.CONFLICT_MESSAGE)


class AppointmentTransitionError(Exception):
    pass


class AppointmentService:
    """
    Appointment write-model operations.

    Notes:
    - Every create/update that leaves the appointment active re-runs the overlap check.
    - The check and the write share one transaction that first locks the dentist's Staff row,
      so two bookings for the same dentist are serialized instead of racing.
    - Status is a flat field; the only rule is that CANCELLED/COMPLETED/NO_SHOW are final.
    """

    CONFLICT_MESSAGE = "Time slot conflicts with existing appointment"
    UPDATABLE_FIELDS = {"patient_id", "dentist_id", "start_time", "end_time", "notes", "status"}

    # -------------------------
    # Internal helpers
    # -------------------------
    @staticmethod
    def _bus(bus: Optional[EventBus]) -> EventBus:
        return bus if bus is not None else get_event_bus()

    @staticmethod
    def _validate_interval(start_time: datetime, end_time: datetime) -> None:
        if start_time >= end_time:
            raise ValidationError({"end_time": "End time must be after start time."})

    @staticmethod
    def _ensure_patient(patient_id: UUID) -> None:
        if not Patient.objects.filter(id=patient_id).exists():
            raise Patient.DoesNotExist("Patient not found.")

    @staticmethod
    def _lock_dentist(dentist_id: Optional[UUID]) -> Optional[Staff]:
        if dentist_id is None:
            return None
        dentist = Staff.objects.select_for_update().filter(id=dentist_id).first()
        if dentist is None:
            raise Staff.DoesNotExist("Dentist not found.")
        if dentist.role != StaffRole.DENTIST or not dentist.is_active:
            raise ValidationError({"dentist_id": "Selected staff member is not an active dentist."})
        return dentist

    @staticmethod
    def _ensure_free(
        *,
        dentist_id: Optional[UUID],
        start_time: datetime,
        end_time: datetime,
        exclude_appointment_id: Optional[UUID] = None,
    ) -> None:
        clashes = list(
            find_conflicts(
                dentist_id=dentist_id,
                start_time=start_time,
                end_time=end_time,
                exclude_appointment_id=exclude_appointment_id,
            ).values_list("id", flat=True)[:5]
        )
        if clashes:
            logger.warning(
                "Booking conflict for dentist %s in [%s, %s): %s",
                dentist_id,
                start_time.isoformat(),
                end_time.isoformat(),
                ", ".join(str(c) for c in clashes),
            )
            raise AppointmentConflict(clashes)

    @staticmethod
    def _payload(appointment: Appointment, **extra) -> dict:
        payload = {
            "appointment_id": str(appointment.id),
            "patient_id": str(appointment.patient_id),
            "dentist_id": str(appointment.dentist_id) if appointment.dentist_id else None,
            "start_time": appointment.start_time.isoformat(),
            "end_time": appointment.end_time.isoformat(),
            "status": appointment.status,
        }
        payload.update(extra)
        return payload

    # -------------------------
    # Create
    # -------------------------
    @staticmethod
    @transaction.atomic
    def create_appointment(
        *,
        patient_id: UUID,
        start_time: datetime,
        end_time: datetime,
        dentist_id: Optional[UUID] = None,
        notes: str = "",
        status: str = AppointmentStatus.SCHEDULED,
        bus: Optional[EventBus] = None,
    ) -> Appointment:
        AppointmentService._validate_interval(start_time, end_time)
        AppointmentService._ensure_patient(patient_id)
        AppointmentService._lock_dentist(dentist_id)

        if status in ACTIVE_STATUSES:
            AppointmentService._ensure_free(
                dentist_id=dentist_id,
                start_time=start_time,
                end_time=end_time,
            )

        appointment = Appointment.objects.create(
            patient_id=patient_id,
            dentist_id=dentist_id,
            start_time=start_time,
            end_time=end_time,
            notes=notes or "",
            status=status,
        )
        logger.info(
            "Appointment %s scheduled for patient %s with dentist %s",
            appointment.id,
            patient_id,
            dentist_id,
        )

        AppointmentService._bus(bus).publish(
            "appointment.scheduled", AppointmentService._payload(appointment)
        )
        return appointment

    # -------------------------
    # Update (re-validated)
    # -------------------------
    @staticmethod
    @transaction.atomic
    def update_appointment(
        *,
        appointment_id: UUID,
        data: dict,
        bus: Optional[EventBus] = None,
    ) -> Appointment:
        appointment = Appointment.objects.select_for_update().get(id=appointment_id)
        updates = {k: v for k, v in (data or {}).items() if k in AppointmentService.UPDATABLE_FIELDS}

        new_status = updates.get("status", appointment.status)
        if new_status != appointment.status and appointment.status in TERMINAL_STATUSES:
            raise AppointmentTransitionError(
                f"Cannot change status of a {appointment.get_status_display().lower()} appointment."
            )

        if "patient_id" in updates and updates["patient_id"] != appointment.patient_id:
            AppointmentService._ensure_patient(updates["patient_id"])

        start_time = updates.get("start_time", appointment.start_time)
        end_time = updates.get("end_time", appointment.end_time)
        dentist_id = updates["dentist_id"] if "dentist_id" in updates else appointment.dentist_id

        slot_changed = bool({"start_time", "end_time", "dentist_id"} & updates.keys())

        if slot_changed:
            AppointmentService._validate_interval(start_time, end_time)
        if "dentist_id" in updates:
            AppointmentService._lock_dentist(dentist_id)
        elif slot_changed:
            # lock only; same dentist
            Staff.objects.select_for_update().filter(id=dentist_id).first()

        if slot_changed and new_status in ACTIVE_STATUSES:
            AppointmentService._ensure_free(
                dentist_id=dentist_id,
                start_time=start_time,
                end_time=end_time,
                exclude_appointment_id=appointment.id,
            )

        for k, v in updates.items():
            setattr(appointment, k, "" if k == "notes" and v is None else v)
        appointment.save()

        if "patient_id" in updates:
            # check-ins stay with their own patient
            detached = (
                appointment.queue_entries.exclude(patient_id=appointment.patient_id).update(appointment=None)
            )
            if detached:
                logger.info(
                    "Appointment %s moved to patient %s; unlinked %s queue entries",
                    appointment.id,
                    appointment.patient_id,
                    detached,
                )

        logger.info("Appointment %s updated (%s)", appointment.id, ", ".join(sorted(updates)))
        AppointmentService._bus(bus).publish(
            "appointment.updated",
            AppointmentService._payload(appointment, updated_fields=sorted(updates)),
        )
        return appointment

    # -------------------------
    # Status
    # -------------------------
    @staticmethod
    @transaction.atomic
    def update_status(
        *,
        appointment_id: UUID,
        status: str,
        bus: Optional[EventBus] = None,
    ) -> Appointment:
        appointment = Appointment.objects.select_for_update().get(id=appointment_id)

        # Idempotent no-op
        if appointment.status == status:
            return appointment

        if appointment.status in TERMINAL_STATUSES:
            raise AppointmentTransitionError(
                f"Cannot change status of a {appointment.get_status_display().lower()} appointment."
            )

        previous = appointment.status
        appointment.status = status
        appointment.save(update_fields=["status", "updated_at"])

        logger.info("Appointment %s status %s -> %s", appointment.id, previous, status)
        AppointmentService._bus(bus).publish(
            "appointment.status_changed",
            AppointmentService._payload(appointment, previous_status=previous),
        )
        return appointment

    # -------------------------
    # Delete
    # -------------------------
    @staticmethod
    @transaction.atomic
    def delete_appointment(*, appointment_id: UUID, bus: Optional[EventBus] = None) -> None:
        appointment = Appointment.objects.get(id=appointment_id)
        payload = AppointmentService._payload(appointment)
        appointment.delete()

        logger.info("Appointment %s deleted", appointment_id)
        AppointmentService._bus(bus).publish("appointment.deleted", payload)
