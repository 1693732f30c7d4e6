# dc_core/queue/tests/test_queue_services.py
from datetime import datetime

import pytest
from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.utils import timezone

from dc_core.queue.models import QueueEntry, QueueStatus
from dc_core.queue.services import AlreadyQueued, QueueService

pytestmark = pytest.mark.django_db


def test_enqueue_creates_waiting_entry_and_publishes(patient, dentist, bus):
    seen = []
    bus.subscribe("queue.enqueued", seen.append)

    before = timezone.now()
    entry = QueueService.enqueue(patient_id=patient.id, assigned_staff_id=dentist.id, bus=bus)

    assert entry.status == QueueStatus.WAITING
    assert entry.check_in_time >= before
    assert entry.started_at is None and entry.completed_at is None
    assert seen[0]["entry_id"] == str(entry.id)
    assert seen[0]["assigned_staff_id"] == str(dentist.id)


def test_enqueue_keeps_supplied_check_in_time(patient, bus):
    nine = timezone.make_aware(datetime(2030, 3, 4, 9, 0))

    entry = QueueService.enqueue(patient_id=patient.id, check_in_time=nine, bus=bus)

    assert entry.check_in_time == nine


def test_second_enqueue_while_active_fails(patient, bus):
    QueueService.enqueue(patient_id=patient.id, bus=bus)

    with pytest.raises(AlreadyQueued) as exc:
        QueueService.enqueue(patient_id=patient.id, bus=bus)

    assert str(exc.value) == "Patient is already in queue"
    assert QueueEntry.objects.filter(patient=patient).count() == 1


@pytest.mark.parametrize("final", [QueueStatus.COMPLETED, QueueStatus.NO_SHOW])
def test_enqueue_again_after_leaving_the_queue(patient, bus, final):
    first = QueueService.enqueue(patient_id=patient.id, bus=bus)
    QueueService.set_status(entry_id=first.id, status=final, bus=bus)

    second = QueueService.enqueue(patient_id=patient.id, bus=bus)

    assert second.id != first.id
    assert second.status == QueueStatus.WAITING


def test_in_treatment_stamps_started_at_only(patient, bus):
    entry = QueueService.enqueue(patient_id=patient.id, bus=bus)

    entry = QueueService.set_status(entry_id=entry.id, status=QueueStatus.IN_TREATMENT, bus=bus)

    assert entry.started_at is not None
    assert entry.completed_at is None


def test_completed_stamps_completed_at_and_keeps_started_at(patient, bus):
    entry = QueueService.enqueue(patient_id=patient.id, bus=bus)
    entry = QueueService.set_status(entry_id=entry.id, status=QueueStatus.IN_TREATMENT, bus=bus)
    started = entry.started_at

    entry = QueueService.set_status(entry_id=entry.id, status=QueueStatus.COMPLETED, bus=bus)

    assert entry.completed_at is not None
    assert entry.started_at == started


def test_no_show_from_waiting_leaves_started_at_empty(patient, bus):
    entry = QueueService.enqueue(patient_id=patient.id, bus=bus)

    entry = QueueService.set_status(entry_id=entry.id, status=QueueStatus.NO_SHOW, bus=bus)

    assert entry.started_at is None
    assert entry.completed_at is not None


def test_reopening_a_finished_entry_clears_completed_at(patient, bus):
    entry = QueueService.enqueue(patient_id=patient.id, bus=bus)
    QueueService.set_status(entry_id=entry.id, status=QueueStatus.COMPLETED, bus=bus)

    entry = QueueService.set_status(entry_id=entry.id, status=QueueStatus.IN_TREATMENT, bus=bus)
    assert entry.completed_at is None
    assert entry.started_at is not None

    QueueService.set_status(entry_id=entry.id, status=QueueStatus.NO_SHOW, bus=bus)
    entry = QueueService.set_status(entry_id=entry.id, status=QueueStatus.WAITING, bus=bus)
    entry.refresh_from_db()
    assert entry.completed_at is None


def test_status_change_publishes_previous_status(patient, bus):
    entry = QueueService.enqueue(patient_id=patient.id, bus=bus)
    seen = []
    bus.subscribe("queue.status_changed", seen.append)

    QueueService.set_status(entry_id=entry.id, status=QueueStatus.COMPLETED, bus=bus)

    assert seen[0]["status"] == QueueStatus.COMPLETED
    assert seen[0]["previous_status"] == QueueStatus.WAITING


def test_reopening_an_entry_cannot_create_a_second_active_one(patient, bus):
    old = QueueService.enqueue(patient_id=patient.id, bus=bus)
    QueueService.set_status(entry_id=old.id, status=QueueStatus.COMPLETED, bus=bus)
    QueueService.enqueue(patient_id=patient.id, bus=bus)

    with pytest.raises(AlreadyQueued):
        QueueService.set_status(entry_id=old.id, status=QueueStatus.WAITING, bus=bus)


def test_reopening_is_allowed_when_no_other_entry_is_active(patient, bus):
    entry = QueueService.enqueue(patient_id=patient.id, bus=bus)
    QueueService.set_status(entry_id=entry.id, status=QueueStatus.COMPLETED, bus=bus)

    entry = QueueService.set_status(entry_id=entry.id, status=QueueStatus.WAITING, bus=bus)

    assert entry.status == QueueStatus.WAITING


def test_database_rejects_two_active_entries(patient):
    QueueEntry.objects.create(patient=patient, status=QueueStatus.WAITING)

    with pytest.raises(IntegrityError):
        with transaction.atomic():
            QueueEntry.objects.create(patient=patient, status=QueueStatus.IN_TREATMENT)


def test_assign_staff(patient, dentist, bus):
    entry = QueueService.enqueue(patient_id=patient.id, bus=bus)

    entry = QueueService.assign_staff(entry_id=entry.id, staff_id=dentist.id)

    assert entry.assigned_staff_id == dentist.id


def test_assign_inactive_staff_is_rejected(patient, dentist, bus):
    dentist.is_active = False
    dentist.save()
    entry = QueueService.enqueue(patient_id=patient.id, bus=bus)

    with pytest.raises(ValidationError):
        QueueService.assign_staff(entry_id=entry.id, staff_id=dentist.id)


def test_appointment_must_belong_to_patient(patient, other_patient, make_appointment, bus):
    appt = make_appointment(timezone.make_aware(datetime(2030, 3, 4, 9, 0)), patient=other_patient)

    with pytest.raises(ValidationError):
        QueueService.enqueue(patient_id=patient.id, appointment_id=appt.id, bus=bus)


def test_dequeue_publishes_and_deletes(patient, bus):
    entry = QueueService.enqueue(patient_id=patient.id, bus=bus)
    seen = []
    bus.subscribe("queue.dequeued", seen.append)

    QueueService.dequeue(entry_id=entry.id, bus=bus)

    assert not QueueEntry.objects.filter(id=entry.id).exists()
    assert seen[0]["entry_id"] == str(entry.id)
