# dc_core/staff/services.py
from __future__ import annotations

import logging
from uuid import UUID

from django.db import IntegrityError, transaction

from dc_core.staff.models import Staff

logger = logging.getLogger(__name__)


class StaffService:
    """
    Staff write-model operations.
    Deletion is soft: a deactivated member keeps their appointment/queue history.
    """

    UPDATABLE_FIELDS = {"first_name", "last_name", "email", "phone_number", "role", "is_active", "user_id"}

    @staticmethod
    @transaction.atomic
    def create_staff(
        *,
        first_name: str,
        last_name: str,
        email: str,
        role: str,
        phone_number: str = "",
        is_active: bool = True,
        user_id: int | None = None,
    ) -> Staff:
        try:
            with transaction.atomic():
                staff = Staff.objects.create(
                    first_name=first_name,
                    last_name=last_name,
                    email=email.lower(),
                    role=role,
                    phone_number=phone_number or "",
                    is_active=is_active,
                    user_id=user_id,
                )
        except IntegrityError:
            raise ValueError("A staff member with this email already exists.")

        logger.info("Staff %s created with role %s", staff.id, staff.role)
        return staff

    @staticmethod
    @transaction.atomic
    def update_staff(*, staff_id: UUID, data: dict) -> Staff:
        staff = Staff.objects.select_for_update().get(id=staff_id)

        updates = {k: v for k, v in (data or {}).items() if k in StaffService.UPDATABLE_FIELDS}
        if "email" in updates and updates["email"]:
            updates["email"] = updates["email"].lower()

        for k, v in updates.items():
            setattr(staff, k, v)

        try:
            with transaction.atomic():
                staff.save()
        except IntegrityError:
            raise ValueError("A staff member with this email already exists.")

        logger.info("Staff %s updated (%s)", staff.id, ", ".join(sorted(updates)))
        return staff

    @staticmethod
    @transaction.atomic
    def deactivate_staff(*, staff_id: UUID) -> Staff:
        staff = Staff.objects.select_for_update().get(id=staff_id)

        # Idempotent no-op
        if not staff.is_active:
            return staff

        staff.is_active = False
        staff.save(update_fields=["is_active", "updated_at"])
        logger.info("Staff %s deactivated", staff.id)
        return staff
