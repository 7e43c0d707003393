# purchases/views.py

"""
PURCHASES API

- /api/purchases/                          list (filters: item, warehouse, supplier_name, date_from, date_to) / create
- /api/purchases/<id>/                     retrieve / delete (document only, movement kept)
- /api/purchases/orders/                   list (filters: status, supplier_name) / create
- /api/purchases/orders/<id>/              retrieve / delete (Draft only)
- /api/purchases/orders/<id>/status/       POST status transition
- /api/purchases/orders/<id>/receive/      POST goods receipt against the order
- /api/purchases/orders/<id>/receipts/     receipts recorded against the order
- /api/purchases/receipts/                 list / retrieve

Purchases are not edited; correct stock with an adjustment.
"""

from __future__ import annotations

import django_filters
from drf_spectacular.utils import extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.api import service_error_response
from core.exceptions import ERPServiceError
from purchases.models import GoodsReceipt, Purchase, PurchaseOrder
from purchases.serializers import (
    GoodsReceiptInputSerializer,
    GoodsReceiptSerializer,
    PurchaseInputSerializer,
    PurchaseOrderInputSerializer,
    PurchaseOrderSerializer,
    PurchaseOrderStatusSerializer,
    PurchaseSerializer,
)
from purchases.services.purchase_order_service import (
    create_purchase_order,
    delete_purchase_order,
    record_goods_receipt,
    update_purchase_order_status,
)
from purchases.services.purchase_service import delete_purchase, record_purchase
from users.permissions import IsStorekeeperOrAdmin


class PurchaseFilter(django_filters.FilterSet):
    date_from = django_filters.DateFilter(field_name="purchase_date", lookup_expr="gte")
    date_to = django_filters.DateFilter(field_name="purchase_date", lookup_expr="lte")
    supplier_name = django_filters.CharFilter(lookup_expr="icontains")

    class Meta:
        model = Purchase
        fields = ["item", "warehouse"]


class PurchaseOrderFilter(django_filters.FilterSet):
    supplier_name = django_filters.CharFilter(lookup_expr="icontains")

    class Meta:
        model = PurchaseOrder
        fields = ["status", "warehouse"]


class PurchaseViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    queryset = Purchase.objects.select_related("item", "warehouse").order_by("-purchase_date", "-id")
    serializer_class = PurchaseSerializer
    permission_classes = [IsAuthenticated]
    filterset_class = PurchaseFilter

    def get_permissions(self):
        if self.action == "destroy":
            return [IsStorekeeperOrAdmin()]
        return super().get_permissions()

    @extend_schema(request=PurchaseInputSerializer, responses={201: PurchaseSerializer})
    def create(self, request, *args, **kwargs):
        serializer = PurchaseInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            purchase = record_purchase(user=request.user, **serializer.validated_data)
        except ERPServiceError as exc:
            return service_error_response(exc)

        return Response(PurchaseSerializer(purchase).data, status=status.HTTP_201_CREATED)

    def destroy(self, request, *args, **kwargs):
        try:
            purchase_no = delete_purchase(kwargs["pk"], user=request.user)
        except ERPServiceError as exc:
            return service_error_response(exc)

        return Response({"detail": f"Purchase {purchase_no} deleted"})


class PurchaseOrderViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    queryset = PurchaseOrder.objects.prefetch_related("items__item").order_by("-po_date", "-id")
    serializer_class = PurchaseOrderSerializer
    permission_classes = [IsAuthenticated]
    filterset_class = PurchaseOrderFilter

    def get_permissions(self):
        if self.action in ("destroy", "receive"):
            return [IsStorekeeperOrAdmin()]
        return super().get_permissions()

    @extend_schema(request=PurchaseOrderInputSerializer, responses={201: PurchaseOrderSerializer})
    def create(self, request, *args, **kwargs):
        serializer = PurchaseOrderInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            po = create_purchase_order(user=request.user, **serializer.validated_data)
        except ERPServiceError as exc:
            return service_error_response(exc)

        return Response(PurchaseOrderSerializer(po).data, status=status.HTTP_201_CREATED)

    def destroy(self, request, *args, **kwargs):
        try:
            po_no = delete_purchase_order(kwargs["pk"], user=request.user)
        except ERPServiceError as exc:
            return service_error_response(exc)

        return Response({"detail": f"Purchase order {po_no} deleted"})

    @extend_schema(request=PurchaseOrderStatusSerializer, responses={200: PurchaseOrderSerializer})
    @action(detail=True, methods=["post"], url_path="status")
    def set_status(self, request, pk=None):
        serializer = PurchaseOrderStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            po = update_purchase_order_status(pk, serializer.validated_data["status"], user=request.user)
        except ERPServiceError as exc:
            return service_error_response(exc)

        return Response(PurchaseOrderSerializer(po).data)

    @extend_schema(request=GoodsReceiptInputSerializer, responses={201: GoodsReceiptSerializer})
    @action(detail=True, methods=["post"])
    def receive(self, request, pk=None):
        serializer = GoodsReceiptInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            receipt = record_goods_receipt(purchase_order_id=pk, user=request.user, **serializer.validated_data)
        except ERPServiceError as exc:
            return service_error_response(exc)

        return Response(GoodsReceiptSerializer(receipt).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["get"])
    def receipts(self, request, pk=None):
        po = self.get_object()
        receipts = po.receipts.prefetch_related("items").order_by("receipt_date", "id")
        return Response(GoodsReceiptSerializer(receipts, many=True).data)


class GoodsReceiptViewSet(viewsets.ReadOnlyModelViewSet):
    queryset = GoodsReceipt.objects.select_related("purchase_order").prefetch_related("items").order_by(
        "-receipt_date", "-id"
    )
    serializer_class = GoodsReceiptSerializer
    permission_classes = [IsAuthenticated]
    filterset_fields = ["purchase_order", "warehouse"]
