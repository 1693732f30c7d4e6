# dc_core/patients/models.py
from django.db import models

from dc_core.common.models import UUIDModel


class Gender(models.TextChoices):
    MALE = "MALE", "Male"
    FEMALE = "FEMALE", "Female"


class BloodType(models.TextChoices):
    A_POSITIVE = "A_POSITIVE", "A+"
    A_NEGATIVE = "A_NEGATIVE", "A-"
    B_POSITIVE = "B_POSITIVE", "B+"
    B_NEGATIVE = "B_NEGATIVE", "B-"
    AB_POSITIVE = "AB_POSITIVE", "AB+"
    AB_NEGATIVE = "AB_NEGATIVE", "AB-"
    O_POSITIVE = "O_POSITIVE", "O+"
    O_NEGATIVE = "O_NEGATIVE", "O-"


class Patient(UUIDModel):
    """
    Patient record. Address follows the Ethiopian layout (city / subcity / woreda).
    """
    first_name = models.CharField(max_length=120)
    last_name = models.CharField(max_length=120)
    gender = models.CharField(max_length=16, choices=Gender.choices)
    date_of_birth = models.DateField()

    phone_number = models.CharField(max_length=32, blank=True)
    email = models.EmailField(blank=True)
    blood_type = models.CharField(max_length=16, choices=BloodType.choices, blank=True)

    street = models.CharField(max_length=255, blank=True)
    city = models.CharField(max_length=120, blank=True)
    subcity = models.CharField(max_length=120, blank=True)
    woreda = models.CharField(max_length=64, blank=True)
    house_number = models.CharField(max_length=32, blank=True)

    class Meta:
        db_table = "patients_patient"
        indexes = [
            models.Index(fields=["last_name", "first_name"]),
            models.Index(fields=["phone_number"]),
        ]

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def __str__(self) -> str:
        return self.full_name
