# reconciliation/urls.py

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from reconciliation.views import ReconciliationViewSet

router = DefaultRouter()
router.register(r"", ReconciliationViewSet, basename="reconciliation")

urlpatterns = [
    path("", include(router.urls)),
]
