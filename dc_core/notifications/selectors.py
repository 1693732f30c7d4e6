from __future__ import annotations

from datetime import datetime
from typing import Any

from django.core.exceptions import ValidationError
from django.db.models import QuerySet

from dc_core.common.dates import parse_bound
from dc_core.notifications.models import Notification, NotificationChannel


class NotificationSelector:
    class NotFound(Exception):
        pass

    @staticmethod
    def get_notification(*, notification_id) -> Notification:
        try:
            return Notification.objects.get(id=notification_id)
        except (Notification.DoesNotExist, ValidationError):
            raise NotificationSelector.NotFound()

    @staticmethod
    def notifications_qs(
        *,
        recipient_id=None,
        recipient_type: str | None = None,
        channel: str | None = None,
        sent_from: datetime | None = None,
        sent_to: datetime | None = None,
    ) -> QuerySet[Notification]:
        qs = Notification.objects.all()
        if recipient_id:
            qs = qs.filter(recipient_id=recipient_id)
        if recipient_type:
            qs = qs.filter(recipient_type=recipient_type)
        if channel:
            qs = qs.filter(channel=channel)
        if sent_from is not None:
            qs = qs.filter(sent_at__gte=sent_from)
        if sent_to is not None:
            qs = qs.filter(sent_at__lte=sent_to)
        return qs.order_by("-sent_at")

    @staticmethod
    def from_params(params: Any) -> QuerySet[Notification]:
        """
        Query-string filters: recipient_id, recipient_type, channel, and a sent_at window
        given as start + end (ISO dates or datetimes, both inclusive).
        """
        channel = params.get("channel") or None
        if channel and channel not in NotificationChannel.values:
            raise ValidationError({"channel": f"Unknown channel '{channel}'."})

        raw_start = params.get("start")
        raw_end = params.get("end")
        if bool(raw_start) != bool(raw_end):
            raise ValidationError({"start": "start and end must be provided together."})

        sent_from = parse_bound(raw_start, "start", end_of_day=False) if raw_start else None
        sent_to = parse_bound(raw_end, "end", end_of_day=True) if raw_end else None

        return NotificationSelector.notifications_qs(
            recipient_id=params.get("recipient_id") or None,
            recipient_type=params.get("recipient_type") or None,
            channel=channel,
            sent_from=sent_from,
            sent_to=sent_to,
        )
