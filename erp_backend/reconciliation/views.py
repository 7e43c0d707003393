# reconciliation/views.py

"""
CONSISTENCY REPAIR API

POST /api/reconciliation/run/     admin only, runs the repair pass
GET  /api/reconciliation/check/   drift report, nothing written
"""

from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from reconciliation.services.repair import check_drift, run_repair_pass
from users.permissions import IsAccountantOrAdmin, IsAdmin


class ReconciliationViewSet(viewsets.ViewSet):
    permission_classes = [IsAccountantOrAdmin]

    @extend_schema(request=None, responses={200: dict})
    @action(detail=False, methods=["post"], url_path="run", permission_classes=[IsAdmin])
    def run(self, request):
        report = run_repair_pass(user=request.user)
        return Response(report.as_dict())

    @extend_schema(responses={200: dict})
    @action(detail=False, methods=["get"], url_path="check")
    def check(self, request):
        return Response(check_drift().as_dict())
