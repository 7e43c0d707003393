# customers/views.py

"""
======================================================
PATH: customers/views.py
======================================================
CUSTOMERS API

- /api/customers/                          list / create / retrieve / update
- /api/customers/<id>/ledger/              ledger rows (stored running balance)
- /api/customers/<id>/statement/?date_from=&date_to=
- /api/customers/<id>/balance/             recompute + return current balance
- /api/customers/recalculate-balances/     POST, recompute every customer

Customers are never deleted (ledger rows reference them); deactivate instead.
======================================================
"""

from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.api import service_error_response
from core.exceptions import ERPServiceError
from customers.models import Customer
from customers.serializers import (
    CustomerLedgerEntrySerializer,
    CustomerSerializer,
    StatementQuerySerializer,
)
from customers.services.customer_ledger import (
    create_customer,
    get_customer_ledger,
    get_customer_statement,
    recalculate_all_customer_balances,
    update_customer_balance,
)
from users.permissions import IsAccountantOrAdmin


class CustomerViewSet(viewsets.ModelViewSet):
    queryset = Customer.objects.all().order_by("customer_code")
    serializer_class = CustomerSerializer
    permission_classes = [IsAuthenticated]
    filterset_fields = ["is_active", "customer_code"]
    http_method_names = ["get", "post", "put", "patch", "head", "options"]

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            customer = create_customer(user=request.user, **serializer.validated_data)
        except ERPServiceError as exc:
            return service_error_response(exc)

        return Response(CustomerSerializer(customer).data, status=status.HTTP_201_CREATED)

    @extend_schema(responses={200: CustomerLedgerEntrySerializer(many=True)})
    @action(detail=True, methods=["get"], url_path="ledger")
    def ledger(self, request, pk=None):
        try:
            qs = get_customer_ledger(pk)
        except ERPServiceError as exc:
            return service_error_response(exc)

        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(CustomerLedgerEntrySerializer(page, many=True).data)
        return Response(CustomerLedgerEntrySerializer(qs, many=True).data)

    @extend_schema(parameters=[StatementQuerySerializer], responses={200: dict})
    @action(detail=True, methods=["get"], url_path="statement")
    def statement(self, request, pk=None):
        params = StatementQuerySerializer(data=request.query_params)
        params.is_valid(raise_exception=True)

        try:
            data = get_customer_statement(
                pk,
                date_from=params.validated_data.get("date_from"),
                date_to=params.validated_data.get("date_to"),
            )
        except ERPServiceError as exc:
            return service_error_response(exc)

        return Response(data)

    @extend_schema(responses={200: dict})
    @action(detail=True, methods=["get"], url_path="balance")
    def balance(self, request, pk=None):
        customer = self.get_object()
        current = update_customer_balance(customer.id)
        return Response(
            {
                "customer_id": customer.id,
                "current_balance": str(current),
                "credit_limit": str(customer.credit_limit),
            }
        )

    @extend_schema(request=None, responses={200: dict})
    @action(
        detail=False,
        methods=["post"],
        url_path="recalculate-balances",
        permission_classes=[IsAccountantOrAdmin],
    )
    def recalculate_balances(self, request):
        changed = recalculate_all_customer_balances()
        return Response({"updated": changed})
