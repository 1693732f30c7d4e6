from __future__ import annotations

from rest_framework import serializers

from dc_core.notifications.models import (
    Notification,
    NotificationChannel,
    NotificationKind,
    RecipientType,
)


class NotificationCreateSerializer(serializers.Serializer):
    recipient_id = serializers.UUIDField()
    recipient_type = serializers.ChoiceField(choices=RecipientType.choices)
    message = serializers.CharField(max_length=2000)
    channel = serializers.ChoiceField(
        choices=NotificationChannel.choices,
        required=False,
        default=NotificationChannel.PUSH,
    )
    kind = serializers.ChoiceField(
        choices=NotificationKind.choices,
        required=False,
        default=NotificationKind.GENERAL,
    )


class NotificationSerializer(serializers.ModelSerializer):
    class Meta:
        model = Notification
        fields = [
            "id",
            "recipient_id",
            "recipient_type",
            "message",
            "channel",
            "kind",
            "sent_at",
            "created_at",
        ]
        read_only_fields = fields


class NotificationUpdateSerializer(serializers.Serializer):
    recipient_id = serializers.UUIDField(required=False)
    recipient_type = serializers.ChoiceField(choices=RecipientType.choices, required=False)
    message = serializers.CharField(max_length=2000, required=False)
    channel = serializers.ChoiceField(choices=NotificationChannel.choices, required=False)
    kind = serializers.ChoiceField(choices=NotificationKind.choices, required=False)

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError("At least one field is required.")
        return attrs


class AppointmentReminderSerializer(serializers.Serializer):
    appointment_id = serializers.UUIDField()
    channel = serializers.ChoiceField(
        choices=NotificationChannel.choices,
        required=False,
        default=NotificationChannel.EMAIL,
    )


class StaffNotificationSerializer(serializers.Serializer):
    staff_id = serializers.UUIDField()
    message = serializers.CharField(max_length=2000)
    channel = serializers.ChoiceField(
        choices=NotificationChannel.choices,
        required=False,
        default=NotificationChannel.EMAIL,
    )


class BulkNotificationSerializer(serializers.Serializer):
    notifications = NotificationCreateSerializer(many=True, allow_empty=False)
