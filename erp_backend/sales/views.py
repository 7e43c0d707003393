# sales/views.py

"""
======================================================
PATH: sales/views.py
======================================================
SALES API

- /api/sales/invoices/                 list / create
- /api/sales/invoices/<id>/            retrieve / update (PUT) / delete
- /api/sales/invoices/<id>/payments/   payments allocated to the invoice
- /api/sales/payments/                 list / create (multi-invoice)
- /api/sales/payments/<id>/            retrieve / update metadata / delete
- /api/sales/direct-sales/             list / create (cash sale, no invoice)
- /api/sales/direct-sales/<id>/        retrieve / delete (document only, movement kept)

All writes go through sales.services; ERPServiceError maps to 400/404/409.
Invoice and payment deletes need an accountant or admin; direct-sale
deletes need a storekeeper or admin.
======================================================
"""

from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.api import service_error_response
from core.exceptions import ERPServiceError
from sales.filters import InvoiceFilter, PaymentFilter, SaleFilter
from sales.models import Invoice, Payment, Sale
from sales.serializers import (
    InvoiceInputSerializer,
    InvoicePaymentSerializer,
    InvoiceSerializer,
    InvoiceUpdateInputSerializer,
    PaymentInputSerializer,
    PaymentSerializer,
    PaymentUpdateInputSerializer,
    SaleInputSerializer,
    SaleSerializer,
)
from sales.services.invoice_service import (
    create_invoice,
    delete_invoice,
    get_invoice_payments,
    update_invoice,
)
from sales.services.payment_service import create_payment, delete_payment, update_payment
from sales.services.sale_service import delete_sale, record_sale
from users.permissions import IsAccountantOrAdmin, IsStorekeeperOrAdmin


class InvoiceViewSet(viewsets.ModelViewSet):
    queryset = (
        Invoice.objects.select_related("customer")
        .prefetch_related("items__item")
        .order_by("-invoice_date", "-id")
    )
    serializer_class = InvoiceSerializer
    permission_classes = [IsAuthenticated]
    filterset_class = InvoiceFilter
    http_method_names = ["get", "post", "put", "delete", "head", "options"]

    def get_permissions(self):
        if self.action == "destroy":
            return [IsAccountantOrAdmin()]
        return super().get_permissions()

    @extend_schema(request=InvoiceInputSerializer, responses={201: InvoiceSerializer})
    def create(self, request, *args, **kwargs):
        serializer = InvoiceInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            invoice = create_invoice(user=request.user, **serializer.validated_data)
        except ERPServiceError as exc:
            return service_error_response(exc)

        return Response(InvoiceSerializer(invoice).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=InvoiceUpdateInputSerializer, responses={200: InvoiceSerializer})
    def update(self, request, *args, **kwargs):
        serializer = InvoiceUpdateInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            invoice = update_invoice(kwargs["pk"], user=request.user, **serializer.validated_data)
        except ERPServiceError as exc:
            return service_error_response(exc)

        return Response(InvoiceSerializer(invoice).data)

    def destroy(self, request, *args, **kwargs):
        try:
            result = delete_invoice(kwargs["pk"], user=request.user)
        except ERPServiceError as exc:
            return service_error_response(exc)

        return Response(
            {"detail": f"Invoice {result['invoice_no']} deleted", **result},
            status=status.HTTP_200_OK,
        )

    @extend_schema(responses={200: InvoicePaymentSerializer(many=True)})
    @action(detail=True, methods=["get"], url_path="payments")
    def payments(self, request, pk=None):
        try:
            rows = get_invoice_payments(pk)
        except ERPServiceError as exc:
            return service_error_response(exc)

        return Response(InvoicePaymentSerializer(rows, many=True).data)


class PaymentViewSet(viewsets.ModelViewSet):
    queryset = (
        Payment.objects.select_related("customer")
        .prefetch_related("allocations__invoice")
        .order_by("-payment_date", "-id")
    )
    serializer_class = PaymentSerializer
    permission_classes = [IsAuthenticated]
    filterset_class = PaymentFilter
    http_method_names = ["get", "post", "patch", "delete", "head", "options"]

    def get_permissions(self):
        if self.action == "destroy":
            return [IsAccountantOrAdmin()]
        return super().get_permissions()

    @extend_schema(request=PaymentInputSerializer, responses={201: PaymentSerializer})
    def create(self, request, *args, **kwargs):
        serializer = PaymentInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            payment = create_payment(user=request.user, **serializer.validated_data)
        except ERPServiceError as exc:
            return service_error_response(exc)

        return Response(PaymentSerializer(payment).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=PaymentUpdateInputSerializer, responses={200: PaymentSerializer})
    def partial_update(self, request, *args, **kwargs):
        serializer = PaymentUpdateInputSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        try:
            payment = update_payment(kwargs["pk"], user=request.user, **serializer.validated_data)
        except ERPServiceError as exc:
            return service_error_response(exc)

        return Response(PaymentSerializer(payment).data)

    def destroy(self, request, *args, **kwargs):
        try:
            result = delete_payment(kwargs["pk"], user=request.user)
        except ERPServiceError as exc:
            return service_error_response(exc)

        return Response({"detail": f"Payment {result['payment_no']} deleted", **result})


class DirectSaleViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    queryset = Sale.objects.select_related("item", "warehouse").order_by("-sale_date", "-id")
    serializer_class = SaleSerializer
    permission_classes = [IsAuthenticated]
    filterset_class = SaleFilter

    def get_permissions(self):
        if self.action == "destroy":
            return [IsStorekeeperOrAdmin()]
        return super().get_permissions()

    @extend_schema(request=SaleInputSerializer, responses={201: SaleSerializer})
    def create(self, request, *args, **kwargs):
        serializer = SaleInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            sale = record_sale(user=request.user, **serializer.validated_data)
        except ERPServiceError as exc:
            return service_error_response(exc)

        return Response(SaleSerializer(sale).data, status=status.HTTP_201_CREATED)

    def destroy(self, request, *args, **kwargs):
        try:
            sale_no = delete_sale(kwargs["pk"], user=request.user)
        except ERPServiceError as exc:
            return service_error_response(exc)

        return Response({"detail": f"Sale {sale_no} deleted"})
