# inventory/views.py

"""
======================================================
PATH: inventory/views.py
======================================================
INVENTORY API

Reference data:
- /api/inventory/items/          CRUD (current_stock read-only)
- /api/inventory/warehouses/     CRUD

Stock ledger:
- /api/inventory/items/<id>/ledger/?warehouse=<id>   newest first
- /api/inventory/movements/       list (filters) + POST manual adjustment
- /api/inventory/balances/        per (item, warehouse) cache
- /api/inventory/summary/         per item with warehouse breakdown

Movements are immutable: no update/delete endpoints exist.
======================================================
"""

from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from activity.services.activity_logger import Action, activity_logger
from core.api import service_error_response
from core.exceptions import ERPServiceError
from inventory.filters import StockMovementFilter
from inventory.models import Item, StockBalance, StockMovement, Warehouse
from inventory.serializers import (
    ItemSerializer,
    StockAdjustmentInputSerializer,
    StockBalanceSerializer,
    StockMovementSerializer,
    WarehouseSerializer,
)
from inventory.services.stock_ledger import get_item_ledger, record_adjustment, stock_summary


class ItemViewSet(viewsets.ModelViewSet):
    queryset = Item.objects.all().order_by("item_code")
    serializer_class = ItemSerializer
    permission_classes = [IsAuthenticated]
    filterset_fields = ["is_active", "category", "item_code"]

    def perform_create(self, serializer):
        item = serializer.save()
        activity_logger.log_crud(
            Action.ITEM_CREATE,
            "ITEM",
            item.item_code,
            request=self.request,
            description=f"Item {item.item_code} created",
        )

    def destroy(self, request, *args, **kwargs):
        item = self.get_object()
        if item.stock_movements.exists():
            # Movements are PROTECTed; deactivate instead.
            item.is_active = False
            item.save(update_fields=["is_active", "updated_at"])
            return Response(
                {"detail": "Item has stock movements; it was deactivated instead."},
                status=status.HTTP_200_OK,
            )
        return super().destroy(request, *args, **kwargs)

    @extend_schema(responses={200: StockMovementSerializer(many=True)})
    @action(detail=True, methods=["get"], url_path="ledger")
    def ledger(self, request, pk=None):
        try:
            qs = get_item_ledger(pk, request.query_params.get("warehouse") or None)
        except ERPServiceError as exc:
            return service_error_response(exc)

        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(StockMovementSerializer(page, many=True).data)
        return Response(StockMovementSerializer(qs, many=True).data)


class WarehouseViewSet(viewsets.ModelViewSet):
    queryset = Warehouse.objects.all().order_by("warehouse_code")
    serializer_class = WarehouseSerializer
    permission_classes = [IsAuthenticated]
    filterset_fields = ["is_active"]
    # Warehouses are deactivated, never deleted (movements reference them).
    http_method_names = ["get", "post", "put", "patch", "head", "options"]

    def perform_create(self, serializer):
        warehouse = serializer.save()
        activity_logger.log_crud(
            Action.WAREHOUSE_CREATE,
            "WAREHOUSE",
            warehouse.warehouse_code,
            request=self.request,
            description=f"Warehouse {warehouse.warehouse_code} created",
        )


class StockMovementViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    queryset = StockMovement.objects.select_related("item", "warehouse").order_by(
        "-movement_date", "-created_at", "-id"
    )
    serializer_class = StockMovementSerializer
    permission_classes = [IsAuthenticated]
    filterset_class = StockMovementFilter

    @extend_schema(
        request=StockAdjustmentInputSerializer,
        responses={201: StockMovementSerializer},
        description="Record a manual stock adjustment (signed quantity).",
    )
    def create(self, request):
        serializer = StockAdjustmentInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            result = record_adjustment(
                item_id=data["item_id"],
                warehouse_id=data["warehouse_id"],
                quantity=data["quantity"],
                unit_cost=data.get("unit_cost"),
                remarks=data.get("remarks", ""),
                user=request.user,
            )
        except ERPServiceError as exc:
            return service_error_response(exc)

        movement = StockMovement.objects.get(id=result["movement_id"])
        return Response(StockMovementSerializer(movement).data, status=status.HTTP_201_CREATED)


class StockBalanceViewSet(viewsets.ReadOnlyModelViewSet):
    queryset = StockBalance.objects.select_related("item", "warehouse").order_by("item_id", "warehouse_id")
    serializer_class = StockBalanceSerializer
    permission_classes = [IsAuthenticated]
    filterset_fields = ["item", "warehouse"]


class StockSummaryView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(responses={200: dict}, description="Per-item stock with warehouse breakdown")
    def get(self, request):
        include_inactive = (request.query_params.get("include_inactive") or "").lower() in ("1", "true", "yes")
        return Response(
            stock_summary(
                item_id=request.query_params.get("item") or None,
                include_inactive=include_inactive,
            )
        )
