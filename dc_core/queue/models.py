# dc_core/queue/models.py
from django.db import models
from django.db.models import Q
from django.utils import timezone

from dc_core.appointments.models import Appointment
from dc_core.common.models import UUIDModel
from dc_core.patients.models import Patient
from dc_core.staff.models import Staff


class QueueStatus(models.TextChoices):
    WAITING = "WAITING", "Waiting"
    IN_TREATMENT = "IN_TREATMENT", "In Treatment"
    COMPLETED = "COMPLETED", "Completed"
    NO_SHOW = "NO_SHOW", "No Show"


ACTIVE_QUEUE_STATUSES = (QueueStatus.WAITING, QueueStatus.IN_TREATMENT)


class QueueEntry(UUIDModel):
    """
    A patient's check-in on the treatment floor.

    WAITING -> IN_TREATMENT stamps started_at;
    -> COMPLETED / NO_SHOW stamps completed_at.
    """
    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name="queue_entries")
    assigned_staff = models.ForeignKey(
        Staff,
        on_delete=models.SET_NULL,
        related_name="queue_entries",
        null=True,
        blank=True,
    )
    appointment = models.ForeignKey(
        Appointment,
        on_delete=models.SET_NULL,
        related_name="queue_entries",
        null=True,
        blank=True,
    )

    status = models.CharField(
        max_length=16,
        choices=QueueStatus.choices,
        default=QueueStatus.WAITING,
        db_index=True,
    )
    check_in_time = models.DateTimeField(default=timezone.now, db_index=True)
    started_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True, db_index=True)
    notes = models.TextField(blank=True, default="")

    class Meta:
        db_table = "queue_queueentry"
        verbose_name_plural = "queue entries"
        indexes = [
            models.Index(fields=["status", "check_in_time"]),
            models.Index(fields=["assigned_staff", "status"]),
        ]
        constraints = [
            # one WAITING/IN_TREATMENT entry per patient
            models.UniqueConstraint(
                fields=["patient"],
                condition=Q(status__in=ACTIVE_QUEUE_STATUSES),
                name="uq_queue_one_active_entry_per_patient",
            ),
        ]

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_QUEUE_STATUSES

    def __str__(self) -> str:
        return f"{self.patient_id} [{self.status}] @ {self.check_in_time:%Y-%m-%d %H:%M}"
