# sales/urls.py

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from sales.views import DirectSaleViewSet, InvoiceViewSet, PaymentViewSet

router = DefaultRouter()
router.register(r"invoices", InvoiceViewSet, basename="invoices")
router.register(r"payments", PaymentViewSet, basename="payments")
router.register(r"direct-sales", DirectSaleViewSet, basename="direct-sales")

urlpatterns = [
    path("", include(router.urls)),
]
