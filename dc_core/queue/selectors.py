# dc_core/queue/selectors.py
from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Any, Optional, Tuple

from django.core.exceptions import ValidationError
from django.db.models import Case, IntegerField, QuerySet, Value, When
from django.utils import timezone

from dc_core.queue.models import ACTIVE_QUEUE_STATUSES, QueueEntry, QueueStatus

WEEKDAY_NAMES = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")

# Enum declaration order: WAITING, IN_TREATMENT, COMPLETED, NO_SHOW
_STATUS_RANK = Case(
    *[When(status=value, then=Value(rank)) for rank, value in enumerate(QueueStatus.values)],
    default=Value(len(QueueStatus.values)),
    output_field=IntegerField(),
)

_TRUTHY = {"1", "true", "yes", "on"}


class QueueSelector:
    class NotFound(Exception):
        pass

    @staticmethod
    def _base() -> QuerySet[QueueEntry]:
        return QueueEntry.objects.select_related("patient", "assigned_staff", "appointment")

    @staticmethod
    def get_entry(*, entry_id) -> QueueEntry:
        try:
            return QueueSelector._base().get(id=entry_id)
        except (QueueEntry.DoesNotExist, ValidationError):
            raise QueueSelector.NotFound()

    @staticmethod
    def list_queue() -> QuerySet[QueueEntry]:
        """
        Full queue: WAITING first, then IN_TREATMENT, COMPLETED, NO_SHOW;
        earliest check-in first within a status.
        """
        return (
            QueueSelector._base()
            .annotate(status_rank=_STATUS_RANK)
            .order_by("status_rank", "check_in_time", "created_at")
        )

    @staticmethod
    def by_status(*, status: str) -> QuerySet[QueueEntry]:
        return QueueSelector._base().filter(status=status).order_by("check_in_time", "created_at")

    @staticmethod
    def by_staff(*, staff_id) -> QuerySet[QueueEntry]:
        return (
            QueueSelector._base()
            .filter(assigned_staff_id=staff_id)
            .annotate(status_rank=_STATUS_RANK)
            .order_by("status_rank", "check_in_time")
        )

    @staticmethod
    def by_patient(*, patient_id) -> QuerySet[QueueEntry]:
        return QueueSelector._base().filter(patient_id=patient_id).order_by("-created_at")

    @staticmethod
    def active() -> QuerySet[QueueEntry]:
        return QueueSelector.list_queue().filter(status__in=ACTIVE_QUEUE_STATUSES)

    @staticmethod
    def active_entry_for(*, patient_id) -> Optional[QueueEntry]:
        return QueueEntry.objects.filter(patient_id=patient_id, status__in=ACTIVE_QUEUE_STATUSES).first()

    @staticmethod
    def from_params(params: Any) -> QuerySet[QueueEntry]:
        """
        Query params supported (first match wins):
          - patient_id
          - staff_id
          - status
          - active=true
        """
        patient_id = params.get("patient_id")
        staff_id = params.get("staff_id")
        status = params.get("status")
        active = str(params.get("active", "")).lower() in _TRUTHY

        if patient_id:
            return QueueSelector.by_patient(patient_id=patient_id)
        if staff_id:
            return QueueSelector.by_staff(staff_id=staff_id)
        if status:
            if status not in QueueStatus.values:
                raise ValidationError({"status": f"Unknown queue status '{status}'."})
            return QueueSelector.by_status(status=status)
        if active:
            return QueueSelector.active()
        return QueueSelector.list_queue()


# -------------------------
# Weekly completions
# -------------------------
def week_range(reference: date | datetime | None = None) -> Tuple[datetime, datetime]:
    """
    Local calendar week (Monday 00:00:00 .. Sunday 23:59:59.999999) containing `reference`.
    """
    if reference is None:
        day = timezone.localdate()
    elif isinstance(reference, datetime):
        day = timezone.localtime(reference).date() if timezone.is_aware(reference) else reference.date()
    else:
        day = reference

    monday = day - timedelta(days=day.weekday())
    sunday = monday + timedelta(days=6)
    return (
        timezone.make_aware(datetime.combine(monday, time.min)),
        timezone.make_aware(datetime.combine(sunday, time.max)),
    )


def weekly_completions(
    *,
    reference: date | datetime | None = None,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
) -> list[dict]:
    """
    COMPLETED entries per local weekday, Monday first:
      [{"name": "Mon", "count": 1}, {"name": "Tue", "count": 0}, ...]

    The window is [start, end] when both are given, else the week around `reference` (today by default).
    """
    if (start is None) != (end is None):
        raise ValidationError({"start": "start and end must be provided together."})
    if start is None:
        start, end = week_range(reference)
    elif start > end:
        raise ValidationError({"end": "end must not be before start."})

    counts = [0] * 7
    completed = QueueEntry.objects.filter(
        status=QueueStatus.COMPLETED,
        completed_at__gte=start,
        completed_at__lte=end,
    ).values_list("completed_at", flat=True)

    for completed_at in completed:
        counts[timezone.localtime(completed_at).weekday()] += 1

    return [{"name": name, "count": count} for name, count in zip(WEEKDAY_NAMES, counts)]

