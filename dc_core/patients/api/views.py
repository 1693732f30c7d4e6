# dc_core/patients/api/views.py
from __future__ import annotations

from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound

from dc_core.common.api.pagination import paginate
from dc_core.common.api.responses import success_response
from dc_core.common.permissions import PatientPermission
from dc_core.patients.api.serializers import (
    PatientBulkDeleteSerializer,
    PatientCreateSerializer,
    PatientSerializer,
    PatientUpdateSerializer,
)
from dc_core.patients.models import Patient
from dc_core.patients.selectors import get_patient, search_patients
from dc_core.patients.services import PatientService


def _get_patient_or_404(pk) -> Patient:
    try:
        return get_patient(patient_id=pk)
    except (Patient.DoesNotExist, DjangoValidationError):
        raise NotFound("Patient not found.")


class PatientViewSet(viewsets.ViewSet):
    permission_classes = [PatientPermission]

    # spectacular + path param typing
    serializer_class = PatientSerializer
    queryset = Patient.objects.none()

    def list(self, request):
        q = request.query_params.get("q", "").strip()
        qs = search_patients(q=q)
        return paginate(request, qs, PatientSerializer)

    def retrieve(self, request, pk=None):
        return success_response(PatientSerializer(_get_patient_or_404(pk)).data)

    def create(self, request):
        ser = PatientCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        patient = PatientService.create_patient(**ser.validated_data)
        return success_response(PatientSerializer(patient).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request, pk=None):
        patient = _get_patient_or_404(pk)

        ser = PatientUpdateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        patient = PatientService.update_patient(patient_id=patient.id, data=ser.validated_data)
        return success_response(PatientSerializer(patient).data)

    def destroy(self, request, pk=None):
        patient = _get_patient_or_404(pk)
        PatientService.delete_patient(patient_id=patient.id)
        return success_response({"id": str(patient.id)}, message="Patient deleted successfully")

    @action(detail=False, methods=["post"], url_path="bulk-delete")
    def bulk_delete(self, request):
        ser = PatientBulkDeleteSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        deleted = PatientService.delete_patients(patient_ids=ser.validated_data["ids"])
        return success_response({"deleted": deleted})
