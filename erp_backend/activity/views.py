# activity/views.py

"""
ACTIVITY LOG API (READ ONLY)

GET /api/activity/                         recent entries (filters: action, entity_type)
GET /api/activity/?entity_type=INVOICE&entity_id=INV-2026-0001
"""

from __future__ import annotations

from rest_framework import viewsets
from rest_framework.permissions import IsAuthenticated

from activity.models import ActivityLog
from activity.serializers import ActivityLogSerializer
from activity.services.activity_logger import activity_logger


class ActivityLogViewSet(viewsets.ReadOnlyModelViewSet):
    serializer_class = ActivityLogSerializer
    permission_classes = [IsAuthenticated]
    filterset_fields = ["action", "entity_type", "entity_id", "log_level"]

    def get_queryset(self):
        # Make queued entries visible before reading.
        activity_logger.flush()
        return ActivityLog.objects.select_related("user").order_by("-created_at", "-id")
