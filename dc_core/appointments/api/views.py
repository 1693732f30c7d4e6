# dc_core/appointments/api/views.py
from __future__ import annotations

from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound

from dc_core.appointments.api.serializers import (
    AppointmentCreateSerializer,
    AppointmentSerializer,
    AppointmentStatusSerializer,
    AppointmentUpdateSerializer,
    ConflictCheckSerializer,
)
from dc_core.appointments.models import Appointment
from dc_core.appointments.selectors import AppointmentSelector, find_conflicts
from dc_core.appointments.services import (
    AppointmentConflict,
    AppointmentService,
    AppointmentTransitionError,
)
from dc_core.common.api.exceptions import ConflictError, as_drf_validation_error
from dc_core.common.api.pagination import paginate
from dc_core.common.api.responses import success_response
from dc_core.common.permissions import AppointmentPermission


class AppointmentViewSet(viewsets.ViewSet):
    """
    Appointment booking.

    Every write that leaves the appointment SCHEDULED/CONFIRMED is checked
    against the dentist's other active appointments; overlaps return 409.
    """

    permission_classes = [AppointmentPermission]

    serializer_class = AppointmentSerializer
    queryset = Appointment.objects.none()

    def _get_object(self, pk) -> Appointment:
        try:
            return AppointmentSelector.get_appointment(appointment_id=pk)
        except AppointmentSelector.NotFound:
            raise NotFound("Appointment not found.")

    def list(self, request):
        try:
            qs = AppointmentSelector.from_params(request.query_params)
        except DjangoValidationError as e:
            raise as_drf_validation_error(e)
        return paginate(request, qs, AppointmentSerializer)

    def retrieve(self, request, pk=None):
        return success_response(AppointmentSerializer(self._get_object(pk)).data)

    def create(self, request):
        ser = AppointmentCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        try:
            appointment = AppointmentService.create_appointment(**ser.validated_data)
        except DjangoValidationError as e:
            raise as_drf_validation_error(e)
        except AppointmentConflict as e:
            raise ConflictError(str(e))

        appointment = AppointmentSelector.get_appointment(appointment_id=appointment.id)
        return success_response(AppointmentSerializer(appointment).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request, pk=None):
        appointment = self._get_object(pk)

        ser = AppointmentUpdateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        try:
            AppointmentService.update_appointment(appointment_id=appointment.id, data=ser.validated_data)
        except DjangoValidationError as e:
            raise as_drf_validation_error(e)
        except (AppointmentConflict, AppointmentTransitionError) as e:
            raise ConflictError(str(e))

        appointment = AppointmentSelector.get_appointment(appointment_id=appointment.id)
        return success_response(AppointmentSerializer(appointment).data)

    def destroy(self, request, pk=None):
        appointment = self._get_object(pk)
        AppointmentService.delete_appointment(appointment_id=appointment.id)
        return success_response({"id": str(appointment.id)}, message="Appointment deleted successfully")

    @action(detail=True, methods=["post"], url_path="status")
    def set_status(self, request, pk=None):
        appointment = self._get_object(pk)

        ser = AppointmentStatusSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        try:
            AppointmentService.update_status(
                appointment_id=appointment.id,
                status=ser.validated_data["status"],
            )
        except AppointmentTransitionError as e:
            raise ConflictError(str(e))

        appointment = AppointmentSelector.get_appointment(appointment_id=appointment.id)
        return success_response(AppointmentSerializer(appointment).data)

    @action(detail=False, methods=["post"], url_path="check-conflict")
    def check_conflict(self, request):
        """
        Dry-run of the booking rule for the form: {"conflict": bool, "conflicting_ids": [...]}.
        """
        ser = ConflictCheckSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data

        ids = [
            str(i)
            for i in find_conflicts(
                dentist_id=data["dentist_id"],
                start_time=data["start_time"],
                end_time=data["end_time"],
                exclude_appointment_id=data.get("exclude_appointment_id"),
            ).values_list("id", flat=True)
        ]
        return success_response({"conflict": bool(ids), "conflicting_ids": ids})
