# dc_core/patients/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from dc_core.patients.models import BloodType, Gender, Patient

# Dashboard form values -> stored enum values
GENDER_ALIASES = {"Male": Gender.MALE, "Female": Gender.FEMALE}
BLOOD_TYPE_ALIASES = {label: value for value, label in BloodType.choices}


class GenderField(serializers.ChoiceField):
    def __init__(self, **kwargs):
        super().__init__(choices=Gender.choices, **kwargs)

    def to_internal_value(self, data):
        return super().to_internal_value(GENDER_ALIASES.get(data, data))


class BloodTypeField(serializers.ChoiceField):
    def __init__(self, **kwargs):
        super().__init__(choices=BloodType.choices, **kwargs)

    def to_internal_value(self, data):
        return super().to_internal_value(BLOOD_TYPE_ALIASES.get(data, data))


class PatientCreateSerializer(serializers.Serializer):
    first_name = serializers.CharField(max_length=120)
    last_name = serializers.CharField(max_length=120)
    gender = GenderField()
    date_of_birth = serializers.DateField()
    phone_number = serializers.CharField(max_length=32, required=False, allow_blank=True, default="")
    email = serializers.EmailField(required=False, allow_blank=True, default="")
    blood_type = BloodTypeField(required=False, allow_blank=True, default="")
    street = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    city = serializers.CharField(max_length=120, required=False, allow_blank=True, default="")
    subcity = serializers.CharField(max_length=120, required=False, allow_blank=True, default="")
    woreda = serializers.CharField(max_length=64, required=False, allow_blank=True, default="")
    house_number = serializers.CharField(max_length=32, required=False, allow_blank=True, default="")


class PatientUpdateSerializer(serializers.Serializer):
    """
    Partial update contract (PATCH).
    """
    first_name = serializers.CharField(max_length=120, required=False)
    last_name = serializers.CharField(max_length=120, required=False)
    gender = GenderField(required=False)
    date_of_birth = serializers.DateField(required=False)
    phone_number = serializers.CharField(max_length=32, required=False, allow_blank=True)
    email = serializers.EmailField(required=False, allow_blank=True)
    blood_type = BloodTypeField(required=False, allow_blank=True)
    street = serializers.CharField(max_length=255, required=False, allow_blank=True)
    city = serializers.CharField(max_length=120, required=False, allow_blank=True)
    subcity = serializers.CharField(max_length=120, required=False, allow_blank=True)
    woreda = serializers.CharField(max_length=64, required=False, allow_blank=True)
    house_number = serializers.CharField(max_length=32, required=False, allow_blank=True)

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError("At least one field is required.")
        return attrs


class PatientBulkDeleteSerializer(serializers.Serializer):
    ids = serializers.ListField(child=serializers.UUIDField(), allow_empty=False, max_length=500)


class PatientSerializer(serializers.ModelSerializer):
    full_name = serializers.CharField(read_only=True)

    class Meta:
        model = Patient
        fields = [
            "id",
            "first_name",
            "last_name",
            "full_name",
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
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields
