from __future__ import annotations

from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound

from dc_core.common.api.exceptions import as_drf_validation_error
from dc_core.common.api.pagination import paginate
from dc_core.common.api.responses import success_response
from dc_core.common.permissions import NotificationPermission
from dc_core.notifications.api.serializers import (
    AppointmentReminderSerializer,
    BulkNotificationSerializer,
    NotificationCreateSerializer,
    NotificationSerializer,
    NotificationUpdateSerializer,
    StaffNotificationSerializer,
)
from dc_core.notifications.models import Notification
from dc_core.notifications.selectors import NotificationSelector
from dc_core.notifications.services import NotificationService


class NotificationViewSet(viewsets.ViewSet):
    permission_classes = [NotificationPermission]

    serializer_class = NotificationSerializer
    queryset = Notification.objects.none()

    def _get_object(self, pk) -> Notification:
        try:
            return NotificationSelector.get_notification(notification_id=pk)
        except NotificationSelector.NotFound:
            raise NotFound("Notification not found.")

    def list(self, request):
        try:
            qs = NotificationSelector.from_params(request.query_params)
        except DjangoValidationError as e:
            raise as_drf_validation_error(e)
        return paginate(request, qs, NotificationSerializer)

    def retrieve(self, request, pk=None):
        return success_response(NotificationSerializer(self._get_object(pk)).data)

    def create(self, request):
        ser = NotificationCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        # Unknown recipient -> DoesNotExist -> 404 via the exception handler
        notification = NotificationService.create_notification(**ser.validated_data)
        return success_response(NotificationSerializer(notification).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request, pk=None):
        notification = self._get_object(pk)

        ser = NotificationUpdateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        notification = NotificationService.update_notification(
            notification_id=notification.id, data=ser.validated_data
        )
        return success_response(NotificationSerializer(notification).data)

    def destroy(self, request, pk=None):
        notification = self._get_object(pk)
        NotificationService.delete_notification(notification_id=notification.id)
        return success_response({"id": str(notification.id)})

    @action(detail=False, methods=["post"], url_path="appointment-reminder")
    def appointment_reminder(self, request):
        ser = AppointmentReminderSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        notification = NotificationService.send_appointment_reminder(**ser.validated_data)
        return success_response(NotificationSerializer(notification).data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=["post"], url_path="staff")
    def staff(self, request):
        ser = StaffNotificationSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        notification = NotificationService.send_staff_notification(**ser.validated_data)
        return success_response(NotificationSerializer(notification).data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=["post"], url_path="bulk")
    def bulk(self, request):
        ser = BulkNotificationSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        results = NotificationService.bulk_send(items=ser.validated_data["notifications"])
        return success_response(
            [
                {
                    "success": r["notification"] is not None,
                    "data": NotificationSerializer(r["notification"]).data if r["notification"] else None,
                    "error": r["error"],
                }
                for r in results
            ],
            sent=sum(1 for r in results if r["notification"] is not None),
        )
