# dc_core/common/dates.py
from __future__ import annotations

from datetime import date, datetime

from django.core.exceptions import ValidationError
from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime


def parse_bound(raw: str, name: str, *, end_of_day: bool) -> datetime:
    """
    Query-string bound -> aware datetime.
    A bare date is widened to the start (or end) of that local day.
    """
    invalid = ValidationError({name: f"{name} is invalid. Use ISO date or datetime."})
    try:
        d = parse_date(raw)
        dt = parse_datetime(raw) if d is None else None
    except ValueError:
        raise invalid

    if d is not None:
        t = datetime.max.time() if end_of_day else datetime.min.time()
        dt = datetime.combine(d, t)
    elif dt is None:
        raise invalid
    if timezone.is_naive(dt):
        dt = timezone.make_aware(dt)
    return dt


def parse_day(raw: str, name: str = "date") -> date:
    try:
        d = parse_date(raw)
    except ValueError:
        d = None
    if d is None:
        raise ValidationError({name: f"{name} is invalid. Use YYYY-MM-DD."})
    return d
