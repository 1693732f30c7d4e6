# dc_core/staff/api/views.py
from __future__ import annotations

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound, ValidationError as DRFValidationError

from dc_core.common.api.responses import success_response
from dc_core.common.permissions import StaffPermission
from dc_core.staff.api.serializers import (
    DentistOptionSerializer,
    StaffCreateSerializer,
    StaffSerializer,
    StaffUpdateSerializer,
)
from dc_core.staff.models import Staff
from dc_core.staff.selectors import StaffSelector
from dc_core.staff.services import StaffService


class StaffViewSet(viewsets.GenericViewSet):
    """
    Staff directory.
    - list supports ?role=, ?is_active=, ?search= and ?ordering= via the default filter backends
    - destroy deactivates (soft delete)
    """

    permission_classes = [StaffPermission]
    serializer_class = StaffSerializer
    queryset = Staff.objects.none()

    filterset_fields = ["role", "is_active"]
    search_fields = ["first_name", "last_name", "email", "phone_number"]
    ordering_fields = ["created_at", "first_name", "last_name"]

    def get_queryset(self):
        return StaffSelector.list_staff()

    def _get_object(self, pk) -> Staff:
        try:
            return StaffSelector.get_staff(staff_id=pk)
        except StaffSelector.NotFound:
            raise NotFound("Staff member not found.")

    def list(self, request):
        qs = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(StaffSerializer(page, many=True).data)
        return success_response(StaffSerializer(qs, many=True).data)

    def retrieve(self, request, pk=None):
        return success_response(StaffSerializer(self._get_object(pk)).data)

    def create(self, request):
        ser = StaffCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        try:
            staff = StaffService.create_staff(**ser.validated_data)
        except ValueError as e:
            raise DRFValidationError({"detail": str(e)})

        return success_response(StaffSerializer(staff).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request, pk=None):
        staff = self._get_object(pk)

        ser = StaffUpdateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        try:
            staff = StaffService.update_staff(staff_id=staff.id, data=ser.validated_data)
        except ValueError as e:
            raise DRFValidationError({"detail": str(e)})

        return success_response(StaffSerializer(staff).data)

    def destroy(self, request, pk=None):
        staff = self._get_object(pk)
        staff = StaffService.deactivate_staff(staff_id=staff.id)
        return success_response(StaffSerializer(staff).data)

    @action(detail=False, methods=["get"])
    def dentists(self, request):
        qs = StaffSelector.list_dentists()
        return success_response(DentistOptionSerializer(qs, many=True).data)
