# inventory/urls.py

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from inventory.views import (
    ItemViewSet,
    StockBalanceViewSet,
    StockMovementViewSet,
    StockSummaryView,
    WarehouseViewSet,
)

router = DefaultRouter()
router.register(r"items", ItemViewSet, basename="items")
router.register(r"warehouses", WarehouseViewSet, basename="warehouses")
router.register(r"movements", StockMovementViewSet, basename="stock-movements")
router.register(r"balances", StockBalanceViewSet, basename="stock-balances")

urlpatterns = [
    path("summary/", StockSummaryView.as_view(), name="stock-summary"),
    path("", include(router.urls)),
]
