# dc_core/appointments/tests/test_appointment_services.py
import uuid
from datetime import datetime, timedelta

import pytest
from django.core.exceptions import ValidationError
from django.utils import timezone

from dc_core.appointments.models import Appointment, AppointmentStatus
from dc_core.appointments.services import (
    AppointmentConflict,
    AppointmentService,
    AppointmentTransitionError,
)
from dc_core.patients.models import Patient
from dc_core.queue.services import QueueService

pytestmark = pytest.mark.django_db

NINE = timezone.make_aware(datetime(2030, 3, 4, 9, 0))
HOUR = timedelta(hours=1)


def _book(patient, dentist, start, end, bus, **kwargs):
    return AppointmentService.create_appointment(
        patient_id=patient.id,
        dentist_id=dentist.id if dentist else None,
        start_time=start,
        end_time=end,
        bus=bus,
        **kwargs,
    )


def test_create_publishes_scheduled_event(patient, dentist, bus):
    seen = []
    bus.subscribe("appointment.scheduled", seen.append)

    appt = _book(patient, dentist, NINE, NINE + HOUR, bus)

    assert appt.status == AppointmentStatus.SCHEDULED
    assert len(seen) == 1
    assert seen[0]["appointment_id"] == str(appt.id)
    assert seen[0]["patient_id"] == str(patient.id)
    assert seen[0]["dentist_id"] == str(dentist.id)


def test_overlapping_booking_is_rejected_and_not_saved(patient, other_patient, dentist, bus):
    _book(patient, dentist, NINE, NINE + HOUR, bus)

    with pytest.raises(AppointmentConflict) as exc:
        _book(other_patient, dentist, NINE + timedelta(minutes=30), NINE + 2 * HOUR, bus)

    assert str(exc.value) == "Time slot conflicts with existing appointment"
    assert Appointment.objects.count() == 1


def test_back_to_back_bookings_are_allowed(patient, other_patient, dentist, bus):
    _book(patient, dentist, NINE, NINE + HOUR, bus)
    _book(other_patient, dentist, NINE + HOUR, NINE + 2 * HOUR, bus)

    assert Appointment.objects.count() == 2


def test_unassigned_bookings_never_conflict(patient, other_patient, bus):
    _book(patient, None, NINE, NINE + HOUR, bus)
    _book(other_patient, None, NINE, NINE + HOUR, bus)

    assert Appointment.objects.filter(dentist__isnull=True).count() == 2


def test_cancelled_booking_skips_the_check(patient, other_patient, dentist, bus):
    _book(patient, dentist, NINE, NINE + HOUR, bus)
    appt = _book(other_patient, dentist, NINE, NINE + HOUR, bus, status=AppointmentStatus.CANCELLED)

    assert appt.status == AppointmentStatus.CANCELLED


def test_unknown_patient_is_not_found(dentist, bus):
    with pytest.raises(Patient.DoesNotExist):
        AppointmentService.create_appointment(
            patient_id=uuid.uuid4(),
            dentist_id=dentist.id,
            start_time=NINE,
            end_time=NINE + HOUR,
            bus=bus,
        )


def test_non_dentist_staff_cannot_be_booked(patient, receptionist, bus):
    with pytest.raises(ValidationError):
        _book(patient, receptionist, NINE, NINE + HOUR, bus)


def test_end_before_start_is_rejected(patient, dentist, bus):
    with pytest.raises(ValidationError):
        _book(patient, dentist, NINE, NINE - HOUR, bus)


def test_update_rechecks_merged_interval(patient, other_patient, dentist, bus):
    _book(patient, dentist, NINE, NINE + HOUR, bus)
    later = _book(other_patient, dentist, NINE + HOUR, NINE + 2 * HOUR, bus)

    with pytest.raises(AppointmentConflict):
        AppointmentService.update_appointment(
            appointment_id=later.id,
            data={"start_time": NINE + timedelta(minutes=45)},
            bus=bus,
        )

    later.refresh_from_db()
    assert later.start_time == NINE + HOUR


def test_update_does_not_conflict_with_itself(patient, dentist, bus):
    appt = _book(patient, dentist, NINE, NINE + HOUR, bus)
    seen = []
    bus.subscribe("appointment.updated", seen.append)

    appt = AppointmentService.update_appointment(
        appointment_id=appt.id,
        data={"start_time": NINE + timedelta(minutes=15), "end_time": NINE + timedelta(minutes=75)},
        bus=bus,
    )

    assert appt.start_time == NINE + timedelta(minutes=15)
    assert seen[0]["updated_fields"] == ["end_time", "start_time"]


def test_update_moving_to_other_dentist_checks_their_calendar(
    patient, other_patient, dentist, other_dentist, bus
):
    _book(patient, other_dentist, NINE, NINE + HOUR, bus)
    appt = _book(other_patient, dentist, NINE, NINE + HOUR, bus)

    with pytest.raises(AppointmentConflict):
        AppointmentService.update_appointment(
            appointment_id=appt.id,
            data={"dentist_id": other_dentist.id},
            bus=bus,
        )


def test_cancelling_frees_the_slot(patient, other_patient, dentist, bus):
    first = _book(patient, dentist, NINE, NINE + HOUR, bus)
    AppointmentService.update_status(appointment_id=first.id, status=AppointmentStatus.CANCELLED, bus=bus)

    second = _book(other_patient, dentist, NINE, NINE + HOUR, bus)

    assert second.status == AppointmentStatus.SCHEDULED


def test_status_change_publishes_previous_status(patient, dentist, bus):
    appt = _book(patient, dentist, NINE, NINE + HOUR, bus)
    seen = []
    bus.subscribe("appointment.status_changed", seen.append)

    AppointmentService.update_status(appointment_id=appt.id, status=AppointmentStatus.CONFIRMED, bus=bus)

    assert len(seen) == 1
    assert seen[0]["appointment_id"] == str(appt.id)
    assert seen[0]["status"] == AppointmentStatus.CONFIRMED
    assert seen[0]["previous_status"] == AppointmentStatus.SCHEDULED


def test_same_status_is_a_silent_noop(patient, dentist, bus):
    appt = _book(patient, dentist, NINE, NINE + HOUR, bus)
    seen = []
    bus.subscribe("appointment.status_changed", seen.append)

    AppointmentService.update_status(appointment_id=appt.id, status=AppointmentStatus.SCHEDULED, bus=bus)

    assert seen == []


def test_terminal_status_is_final(patient, dentist, bus):
    appt = _book(patient, dentist, NINE, NINE + HOUR, bus)
    AppointmentService.update_status(appointment_id=appt.id, status=AppointmentStatus.COMPLETED, bus=bus)

    with pytest.raises(AppointmentTransitionError):
        AppointmentService.update_status(appointment_id=appt.id, status=AppointmentStatus.SCHEDULED, bus=bus)


def test_delete_publishes_snapshot(patient, dentist, bus):
    appt = _book(patient, dentist, NINE, NINE + HOUR, bus)
    seen = []
    bus.subscribe("appointment.deleted", seen.append)

    AppointmentService.delete_appointment(appointment_id=appt.id, bus=bus)

    assert not Appointment.objects.filter(id=appt.id).exists()
    assert seen[0]["appointment_id"] == str(appt.id)


def test_moving_to_another_patient_unlinks_their_check_in(patient, other_patient, dentist, bus):
    appt = _book(patient, dentist, NINE, NINE + HOUR, bus)
    entry = QueueService.enqueue(patient_id=patient.id, appointment_id=appt.id, bus=bus)

    AppointmentService.update_appointment(
        appointment_id=appt.id,
        data={"patient_id": other_patient.id},
        bus=bus,
    )

    entry.refresh_from_db()
    assert entry.patient_id == patient.id
    assert entry.appointment_id is None
