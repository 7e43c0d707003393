# activity/serializers.py

from rest_framework import serializers

from activity.models import ActivityLog


class ActivityLogSerializer(serializers.ModelSerializer):
    user_email = serializers.EmailField(source="user.email", read_only=True, default=None)

    class Meta:
        model = ActivityLog
        fields = [
            "id",
            "user",
            "user_email",
            "action",
            "entity_type",
            "entity_id",
            "description",
            "log_level",
            "ip_address",
            "metadata",
            "duration_ms",
            "created_at",
        ]
        read_only_fields = fields
