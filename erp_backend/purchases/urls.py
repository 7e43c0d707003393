# purchases/urls.py

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from purchases.views import GoodsReceiptViewSet, PurchaseOrderViewSet, PurchaseViewSet

router = DefaultRouter()
# prefixed routes first; the empty prefix would otherwise take "orders" as a pk
router.register(r"orders", PurchaseOrderViewSet, basename="purchase-orders")
router.register(r"receipts", GoodsReceiptViewSet, basename="goods-receipts")
router.register(r"", PurchaseViewSet, basename="purchases")

urlpatterns = [
    path("", include(router.urls)),
]
