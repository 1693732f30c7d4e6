# dc_core/queue/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from dc_core.queue.models import QueueEntry, QueueStatus


class EnqueueSerializer(serializers.Serializer):
    patient_id = serializers.UUIDField()
    assigned_staff_id = serializers.UUIDField(required=False, allow_null=True, default=None)
    appointment_id = serializers.UUIDField(required=False, allow_null=True, default=None)
    check_in_time = serializers.DateTimeField(required=False, allow_null=True, default=None)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True, default="")


class QueueEntryUpdateSerializer(serializers.Serializer):
    assigned_staff_id = serializers.UUIDField(required=False, allow_null=True)
    appointment_id = serializers.UUIDField(required=False, allow_null=True)
    check_in_time = serializers.DateTimeField(required=False)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError("At least one field is required.")
        return attrs


class QueueStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=QueueStatus.choices)


class AssignStaffSerializer(serializers.Serializer):
    staff_id = serializers.UUIDField(allow_null=True)


class WeeklyCompletionSerializer(serializers.Serializer):
    name = serializers.CharField()
    count = serializers.IntegerField()


class QueueEntrySerializer(serializers.ModelSerializer):
    patient_id = serializers.UUIDField(read_only=True)
    patient_name = serializers.CharField(source="patient.full_name", read_only=True)
    assigned_staff_id = serializers.UUIDField(read_only=True, allow_null=True)
    assigned_staff_name = serializers.SerializerMethodField()
    appointment_id = serializers.UUIDField(read_only=True, allow_null=True)

    class Meta:
        model = QueueEntry
        fields = [
            "id",
            "patient_id",
            "patient_name",
            "assigned_staff_id",
            "assigned_staff_name",
            "appointment_id",
            "status",
            "check_in_time",
            "started_at",
            "completed_at",
            "notes",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_assigned_staff_name(self, obj) -> str | None:
        return obj.assigned_staff.full_name if obj.assigned_staff_id else None
