# dc_core/staff/models.py
from django.db import models

from dc_core.common.models import UUIDModel


class StaffRole(models.TextChoices):
    ADMIN = "ADMIN", "Admin"
    DENTIST = "DENTIST", "Dentist"
    RECEPTIONIST = "RECEPTIONIST", "Receptionist"


class Staff(UUIDModel):
    """
    Clinic staff member. Dentists are the practitioners appointments are booked against.
    Login accounts live in django.contrib.auth; user_id is a loose link to them.
    """
    first_name = models.CharField(max_length=120)
    last_name = models.CharField(max_length=120)
    email = models.EmailField(unique=True)
    phone_number = models.CharField(max_length=32, blank=True)

    role = models.CharField(
        max_length=32,
        choices=StaffRole.choices,
        default=StaffRole.RECEPTIONIST,
        db_index=True,
    )
    is_active = models.BooleanField(default=True, db_index=True)

    user_id = models.BigIntegerField(null=True, blank=True, unique=True)

    class Meta:
        db_table = "staff_staff"
        indexes = [
            models.Index(fields=["role", "is_active"]),
            models.Index(fields=["last_name", "first_name"]),
        ]

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_practitioner(self) -> bool:
        return self.is_active and self.role == StaffRole.DENTIST

    def __str__(self) -> str:
        return f"{self.full_name} ({self.role})"
