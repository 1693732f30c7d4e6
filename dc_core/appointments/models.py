# dc_core/appointments/models.py
from django.db import models
from django.db.models import F, Q

from dc_core.common.models import UUIDModel
from dc_core.patients.models import Patient
from dc_core.staff.models import Staff


class AppointmentStatus(models.TextChoices):
    SCHEDULED = "SCHEDULED", "Scheduled"
    CONFIRMED = "CONFIRMED", "Confirmed"
    CANCELLED = "CANCELLED", "Cancelled"
    COMPLETED = "COMPLETED", "Completed"
    NO_SHOW = "NO_SHOW", "No Show"


# Only these hold a dentist's time slot.
ACTIVE_STATUSES = frozenset({AppointmentStatus.SCHEDULED, AppointmentStatus.CONFIRMED})
TERMINAL_STATUSES = frozenset(
    {AppointmentStatus.CANCELLED, AppointmentStatus.COMPLETED, AppointmentStatus.NO_SHOW}
)


class Appointment(UUIDModel):
    """
    Scheduled visit of a patient, optionally booked against a dentist.
    Interval is half-open: [start_time, end_time).
    """
    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name="appointments")
    dentist = models.ForeignKey(
        Staff,
        on_delete=models.SET_NULL,
        related_name="appointments",
        null=True,
        blank=True,
    )

    start_time = models.DateTimeField(db_index=True)
    end_time = models.DateTimeField()

    status = models.CharField(
        max_length=16,
        choices=AppointmentStatus.choices,
        default=AppointmentStatus.SCHEDULED,
        db_index=True,
    )
    notes = models.TextField(blank=True, default="")

    class Meta:
        db_table = "appointments_appointment"
        indexes = [
            models.Index(fields=["dentist", "status", "start_time"]),
            models.Index(fields=["patient", "start_time"]),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(start_time__lt=F("end_time")),
                name="ck_appointment_start_before_end",
            ),
        ]

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES

    def __str__(self) -> str:
        return f"{self.patient_id} @ {self.start_time:%Y-%m-%d %H:%M} ({self.status})"
