# dc_core/patients/selectors.py
from __future__ import annotations

from uuid import UUID

from django.db.models import Q, QuerySet

from dc_core.patients.models import Patient


def get_patient(*, patient_id: UUID) -> Patient:
    return Patient.objects.get(id=patient_id)


def search_patients(*, q: str | None = None) -> QuerySet[Patient]:
    qs = Patient.objects.all()

    qv = (q or "").strip()
    if qv:
        qs = qs.filter(
            Q(first_name__icontains=qv)
            | Q(last_name__icontains=qv)
            | Q(phone_number__icontains=qv)
            | Q(email__icontains=qv)
        )

    return qs.order_by("-created_at")
