# dc_core/appointments/selectors.py
from __future__ import annotations

from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from django.core.exceptions import ValidationError
from django.db.models import QuerySet

from dc_core.appointments.models import ACTIVE_STATUSES, Appointment
from dc_core.common.dates import parse_bound


def find_conflicts(
    *,
    dentist_id: Optional[UUID],
    start_time: datetime,
    end_time: datetime,
    exclude_appointment_id: Optional[UUID] = None,
) -> QuerySet[Appointment]:
    """
    Active appointments of the dentist that overlap [start_time, end_time).

    Existing [s, e) conflicts with proposed [S, E) when any of
      s <= S < e,   s < E <= e,   s >= S and e <= E
    holds, which for non-empty intervals reduces to  s < E and S < e.
    Touching endpoints (e == S or s == E) are not a conflict.
    """
    if dentist_id is None:
        return Appointment.objects.none()

    qs = Appointment.objects.filter(
        dentist_id=dentist_id,
        status__in=ACTIVE_STATUSES,
        start_time__lt=end_time,
        end_time__gt=start_time,
    )
    if exclude_appointment_id is not None:
        qs = qs.exclude(id=exclude_appointment_id)
    return qs


def has_conflict(
    *,
    dentist_id: Optional[UUID],
    start_time: datetime,
    end_time: datetime,
    exclude_appointment_id: Optional[UUID] = None,
) -> bool:
    """
    True if booking the dentist for [start_time, end_time) would double-book them.
    No dentist means nothing to check.
    """
    if dentist_id is None:
        return False
    if start_time >= end_time:
        raise ValidationError({"end_time": "End time must be after start time."})

    return find_conflicts(
        dentist_id=dentist_id,
        start_time=start_time,
        end_time=end_time,
        exclude_appointment_id=exclude_appointment_id,
    ).exists()


class AppointmentSelector:
    class NotFound(Exception):
        pass

    @staticmethod
    def _base() -> QuerySet[Appointment]:
        return Appointment.objects.select_related("patient", "dentist")

    @staticmethod
    def get_appointment(*, appointment_id) -> Appointment:
        try:
            return AppointmentSelector._base().get(id=appointment_id)
        except (Appointment.DoesNotExist, ValidationError):
            raise AppointmentSelector.NotFound()

    @staticmethod
    def list_appointments() -> QuerySet[Appointment]:
        return AppointmentSelector._base().order_by("start_time")

    @staticmethod
    def for_patient(*, patient_id) -> QuerySet[Appointment]:
        return AppointmentSelector._base().filter(patient_id=patient_id).order_by("-start_time")

    @staticmethod
    def for_dentist(*, dentist_id) -> QuerySet[Appointment]:
        return AppointmentSelector._base().filter(dentist_id=dentist_id).order_by("start_time")

    @staticmethod
    def in_range(*, start: datetime, end: datetime) -> QuerySet[Appointment]:
        """
        Appointments starting within [start, end] (both inclusive).
        """
        return (
            AppointmentSelector._base()
            .filter(start_time__gte=start, start_time__lte=end)
            .order_by("start_time")
        )

    @staticmethod
    def from_params(params: Any) -> QuerySet[Appointment]:
        """
        Query params supported:
          - patient_id
          - dentist_id
          - start + end (ISO datetime or date; a bare end date covers the whole day)
          - status
        patient_id wins over dentist_id, which wins over the date range.
        """
        patient_id = params.get("patient_id")
        dentist_id = params.get("dentist_id")
        start_raw = params.get("start")
        end_raw = params.get("end")
        status_param = params.get("status")

        if patient_id:
            qs = AppointmentSelector.for_patient(patient_id=patient_id)
        elif dentist_id:
            qs = AppointmentSelector.for_dentist(dentist_id=dentist_id)
        elif start_raw or end_raw:
            if not (start_raw and end_raw):
                raise ValidationError({"start": "start and end must be provided together."})
            start = parse_bound(start_raw, "start", end_of_day=False)
            end = parse_bound(end_raw, "end", end_of_day=True)
            qs = AppointmentSelector.in_range(start=start, end=end)
        else:
            qs = AppointmentSelector.list_appointments()

        if status_param:
            qs = qs.filter(status=status_param)

        return qs

