# dc_core/patients/services.py
from __future__ import annotations

import logging
from typing import Iterable
from uuid import UUID

from django.db import transaction

from dc_core.patients.models import Patient

logger = logging.getLogger(__name__)


class PatientService:
    UPDATABLE_FIELDS = {
        "first_name",
        "last_name",
        "gender",
        "date_of_birth",
        "phone_number",
        "email",
        "blood_type",
        "street",
        "city",
        "subcity",
        "woreda",
        "house_number",
    }

    @staticmethod
    @transaction.atomic
    def create_patient(**data) -> Patient:
        fields = {k: v for k, v in data.items() if k in PatientService.UPDATABLE_FIELDS}
        # blank strings rather than NULLs for optional text columns
        for k, v in list(fields.items()):
            if v is None and k != "date_of_birth":
                fields[k] = ""

        patient = Patient.objects.create(**fields)
        logger.info("Patient %s created", patient.id)
        return patient

    @staticmethod
    @transaction.atomic
    def update_patient(*, patient_id: UUID, data: dict) -> Patient:
        patient = Patient.objects.select_for_update().get(id=patient_id)

        updates = {k: v for k, v in (data or {}).items() if k in PatientService.UPDATABLE_FIELDS}
        for k, v in updates.items():
            setattr(patient, k, "" if v is None and k != "date_of_birth" else v)

        patient.save()
        logger.info("Patient %s updated (%s)", patient.id, ", ".join(sorted(updates)))
        return patient

    @staticmethod
    @transaction.atomic
    def delete_patient(*, patient_id: UUID) -> None:
        """
        Cascades to the patient's appointments and queue entries.
        """
        patient = Patient.objects.get(id=patient_id)
        patient.delete()
        logger.info("Patient %s deleted", patient_id)

    @staticmethod
    @transaction.atomic
    def delete_patients(*, patient_ids: Iterable[UUID]) -> int:
        ids = list(patient_ids)
        deleted, per_model = Patient.objects.filter(id__in=ids).delete()
        count = per_model.get(Patient._meta.label, 0)
        logger.info("Bulk-deleted %s patients (%s rows including dependents)", count, deleted)
        return count
