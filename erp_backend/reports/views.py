# reports/views.py

"""
REPORTS API (READ ONLY)

GET /api/reports/ar-aging/?as_of=YYYY-MM-DD
GET /api/reports/stock-valuation/?include_inactive=true
GET /api/reports/low-stock/
GET /api/reports/dso/?days=90&as_of=YYYY-MM-DD
"""

from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from reports.serializers import AsOfQuerySerializer, DsoQuerySerializer, StockValuationQuerySerializer
from reports.services import reports as report_service


class ReportViewSet(viewsets.ViewSet):
    permission_classes = [IsAuthenticated]

    @extend_schema(parameters=[AsOfQuerySerializer], responses={200: dict})
    @action(detail=False, methods=["get"], url_path="ar-aging")
    def ar_aging(self, request):
        params = AsOfQuerySerializer(data=request.query_params)
        params.is_valid(raise_exception=True)
        return Response(report_service.ar_aging(params.validated_data.get("as_of")))

    @extend_schema(parameters=[StockValuationQuerySerializer], responses={200: dict})
    @action(detail=False, methods=["get"], url_path="stock-valuation")
    def stock_valuation(self, request):
        params = StockValuationQuerySerializer(data=request.query_params)
        params.is_valid(raise_exception=True)
        return Response(report_service.stock_valuation(include_inactive=params.validated_data["include_inactive"]))

    @extend_schema(responses={200: dict})
    @action(detail=False, methods=["get"], url_path="low-stock")
    def low_stock(self, request):
        return Response(report_service.low_stock())

    @extend_schema(parameters=[DsoQuerySerializer], responses={200: dict})
    @action(detail=False, methods=["get"], url_path="dso")
    def dso(self, request):
        params = DsoQuerySerializer(data=request.query_params)
        params.is_valid(raise_exception=True)
        return Response(
            report_service.days_sales_outstanding(
                days=params.validated_data["days"],
                as_of=params.validated_data.get("as_of"),
            )
        )
