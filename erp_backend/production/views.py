# production/views.py

"""
PRODUCTION API

- /api/production/          list / create
- /api/production/<id>/     retrieve / delete (storekeeper or admin)
"""

from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.api import service_error_response
from core.exceptions import ERPServiceError
from production.models import Production
from production.serializers import ProductionInputPayloadSerializer, ProductionSerializer
from production.services.production_service import delete_production, record_production
from users.permissions import IsStorekeeperOrAdmin


class ProductionViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    queryset = (
        Production.objects.select_related("output_item", "warehouse", "raw_materials_warehouse")
        .prefetch_related("inputs__item")
        .order_by("-production_date", "-created_at", "-id")
    )
    serializer_class = ProductionSerializer
    permission_classes = [IsAuthenticated]
    filterset_fields = ["output_item", "warehouse", "raw_materials_warehouse"]

    def get_permissions(self):
        if self.action == "destroy":
            return [IsStorekeeperOrAdmin()]
        return super().get_permissions()

    @extend_schema(request=ProductionInputPayloadSerializer, responses={201: ProductionSerializer})
    def create(self, request, *args, **kwargs):
        serializer = ProductionInputPayloadSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            production = record_production(user=request.user, **serializer.validated_data)
        except ERPServiceError as exc:
            return service_error_response(exc)

        return Response(ProductionSerializer(production).data, status=status.HTTP_201_CREATED)

    def destroy(self, request, *args, **kwargs):
        try:
            production_no = delete_production(kwargs["pk"], user=request.user)
        except ERPServiceError as exc:
            return service_error_response(exc)

        return Response({"detail": f"Production {production_no} deleted"})
