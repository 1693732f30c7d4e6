# dc_core/appointments/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from dc_core.appointments.models import Appointment, AppointmentStatus


def _check_interval(attrs):
    start_time = attrs.get("start_time")
    end_time = attrs.get("end_time")
    if start_time and end_time and start_time >= end_time:
        raise serializers.ValidationError({"end_time": "End time must be after start time."})


class AppointmentCreateSerializer(serializers.Serializer):
    patient_id = serializers.UUIDField()
    dentist_id = serializers.UUIDField(required=False, allow_null=True, default=None)
    start_time = serializers.DateTimeField()
    end_time = serializers.DateTimeField()
    status = serializers.ChoiceField(
        choices=AppointmentStatus.choices,
        required=False,
        default=AppointmentStatus.SCHEDULED,
    )
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True, default="")

    def validate(self, attrs):
        _check_interval(attrs)
        return attrs


class AppointmentUpdateSerializer(serializers.Serializer):
    """
    Partial update contract (PATCH). The merged interval is re-checked by the service.
    """
    patient_id = serializers.UUIDField(required=False)
    dentist_id = serializers.UUIDField(required=False, allow_null=True)
    start_time = serializers.DateTimeField(required=False)
    end_time = serializers.DateTimeField(required=False)
    status = serializers.ChoiceField(choices=AppointmentStatus.choices, required=False)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError("At least one field is required.")
        _check_interval(attrs)
        return attrs


class AppointmentStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=AppointmentStatus.choices)


class ConflictCheckSerializer(serializers.Serializer):
    dentist_id = serializers.UUIDField(required=False, allow_null=True, default=None)
    start_time = serializers.DateTimeField()
    end_time = serializers.DateTimeField()
    exclude_appointment_id = serializers.UUIDField(required=False, allow_null=True, default=None)

    def validate(self, attrs):
        _check_interval(attrs)
        return attrs


class AppointmentSerializer(serializers.ModelSerializer):
    patient_id = serializers.UUIDField(read_only=True)
    dentist_id = serializers.UUIDField(read_only=True, allow_null=True)
    patient_name = serializers.CharField(source="patient.full_name", read_only=True)
    dentist_name = serializers.SerializerMethodField()

    class Meta:
        model = Appointment
        fields = [
            "id",
            "patient_id",
            "patient_name",
            "dentist_id",
            "dentist_name",
            "start_time",
            "end_time",
            "status",
            "notes",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_dentist_name(self, obj) -> str | None:
        return obj.dentist.full_name if obj.dentist_id else None
