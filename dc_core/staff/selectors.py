# dc_core/staff/selectors.py
from __future__ import annotations

from uuid import UUID

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db.models import Q, QuerySet

from dc_core.staff.models import Staff, StaffRole


class StaffSelector:
    class NotFound(Exception):
        pass

    @staticmethod
    def get_staff(*, staff_id: UUID) -> Staff:
        try:
            return Staff.objects.get(id=staff_id)
        except (Staff.DoesNotExist, DjangoValidationError):
            raise StaffSelector.NotFound()

    @staticmethod
    def list_staff(*, q: str | None = None) -> QuerySet[Staff]:
        qs = Staff.objects.all()

        qv = (q or "").strip()
        if qv:
            qs = qs.filter(
                Q(first_name__icontains=qv)
                | Q(last_name__icontains=qv)
                | Q(email__icontains=qv)
            )
        return qs.order_by("-created_at")

    @staticmethod
    def list_dentists() -> QuerySet[Staff]:
        """
        Active practitioners, alphabetical (appointment dialog dropdown).
        """
        return Staff.objects.filter(role=StaffRole.DENTIST, is_active=True).order_by(
            "first_name", "last_name"
        )
