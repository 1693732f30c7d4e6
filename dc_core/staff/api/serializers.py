# dc_core/staff/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from dc_core.staff.models import Staff, StaffRole


class StaffCreateSerializer(serializers.Serializer):
    first_name = serializers.CharField(max_length=120)
    last_name = serializers.CharField(max_length=120)
    email = serializers.EmailField()
    role = serializers.ChoiceField(choices=StaffRole.choices)
    phone_number = serializers.CharField(max_length=32, required=False, allow_blank=True, default="")
    is_active = serializers.BooleanField(required=False, default=True)
    user_id = serializers.IntegerField(required=False, allow_null=True, default=None)


class StaffUpdateSerializer(serializers.Serializer):
    """
    Partial update contract (PATCH).
    """
    first_name = serializers.CharField(max_length=120, required=False)
    last_name = serializers.CharField(max_length=120, required=False)
    email = serializers.EmailField(required=False)
    role = serializers.ChoiceField(choices=StaffRole.choices, required=False)
    phone_number = serializers.CharField(max_length=32, required=False, allow_blank=True)
    is_active = serializers.BooleanField(required=False)
    user_id = serializers.IntegerField(required=False, allow_null=True)

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError("At least one field is required.")
        return attrs


class StaffSerializer(serializers.ModelSerializer):
    full_name = serializers.CharField(read_only=True)

    class Meta:
        model = Staff
        fields = [
            "id",
            "first_name",
            "last_name",
            "full_name",
            "email",
            "phone_number",
            "role",
            "is_active",
            "user_id",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class DentistOptionSerializer(serializers.ModelSerializer):
    class Meta:
        model = Staff
        fields = ["id", "first_name", "last_name", "email"]
        read_only_fields = fields
