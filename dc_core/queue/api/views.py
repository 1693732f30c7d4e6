# dc_core/queue/api/views.py
from __future__ import annotations

from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound

from dc_core.common.api.exceptions import ConflictError, as_drf_validation_error
from dc_core.common.api.pagination import paginate
from dc_core.common.api.responses import success_response
from dc_core.common.dates import parse_bound, parse_day
from dc_core.common.permissions import QueuePermission
from dc_core.queue.api.serializers import (
    AssignStaffSerializer,
    EnqueueSerializer,
    QueueEntrySerializer,
    QueueEntryUpdateSerializer,
    QueueStatusSerializer,
    WeeklyCompletionSerializer,
)
from dc_core.queue.models import QueueEntry
from dc_core.queue.selectors import QueueSelector, weekly_completions
from dc_core.queue.services import AlreadyQueued, QueueService


class QueueViewSet(viewsets.ViewSet):
    """
    Treatment queue.
    - list: ?patient_id= | ?staff_id= | ?status= | ?active=true
    - status moves stamp started_at / completed_at
    """

    permission_classes = [QueuePermission]

    serializer_class = QueueEntrySerializer
    queryset = QueueEntry.objects.none()

    def _get_object(self, pk) -> QueueEntry:
        try:
            return QueueSelector.get_entry(entry_id=pk)
        except QueueSelector.NotFound:
            raise NotFound("Queue entry not found.")

    def _fresh(self, entry_id):
        return QueueEntrySerializer(QueueSelector.get_entry(entry_id=entry_id)).data

    def list(self, request):
        try:
            qs = QueueSelector.from_params(request.query_params)
        except DjangoValidationError as e:
            raise as_drf_validation_error(e)
        return paginate(request, qs, QueueEntrySerializer)

    def retrieve(self, request, pk=None):
        return success_response(QueueEntrySerializer(self._get_object(pk)).data)

    def create(self, request):
        ser = EnqueueSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        try:
            entry = QueueService.enqueue(**ser.validated_data)
        except DjangoValidationError as e:
            raise as_drf_validation_error(e)
        except AlreadyQueued as e:
            raise ConflictError(str(e))

        return success_response(self._fresh(entry.id), status=status.HTTP_201_CREATED)

    def partial_update(self, request, pk=None):
        entry = self._get_object(pk)

        ser = QueueEntryUpdateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        try:
            QueueService.update_entry(entry_id=entry.id, data=ser.validated_data)
        except DjangoValidationError as e:
            raise as_drf_validation_error(e)

        return success_response(self._fresh(entry.id))

    def destroy(self, request, pk=None):
        entry = self._get_object(pk)
        QueueService.dequeue(entry_id=entry.id)
        return success_response({"id": str(entry.id)}, message="Removed from queue")

    @action(detail=True, methods=["post"], url_path="status")
    def set_status(self, request, pk=None):
        entry = self._get_object(pk)

        ser = QueueStatusSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        try:
            QueueService.set_status(entry_id=entry.id, status=ser.validated_data["status"])
        except AlreadyQueued as e:
            raise ConflictError(str(e))

        return success_response(self._fresh(entry.id))

    @action(detail=True, methods=["post"])
    def assign(self, request, pk=None):
        entry = self._get_object(pk)

        ser = AssignStaffSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        try:
            QueueService.assign_staff(entry_id=entry.id, staff_id=ser.validated_data["staff_id"])
        except DjangoValidationError as e:
            raise as_drf_validation_error(e)

        return success_response(self._fresh(entry.id))

    @action(detail=False, methods=["get"], url_path="weekly-completions")
    def weekly_completions(self, request):
        """
        ?date=YYYY-MM-DD picks the week (default: this week); ?start=&end= gives an explicit window.
        """
        params = request.query_params
        try:
            reference = parse_day(params["date"]) if params.get("date") else None
            start = parse_bound(params["start"], "start", end_of_day=False) if params.get("start") else None
            end = parse_bound(params["end"], "end", end_of_day=True) if params.get("end") else None
            rows = weekly_completions(reference=reference, start=start, end=end)
        except DjangoValidationError as e:
            raise as_drf_validation_error(e)

        return success_response(WeeklyCompletionSerializer(rows, many=True).data)
