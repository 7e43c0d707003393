# production/urls.py

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from production.views import ProductionViewSet

router = DefaultRouter()
router.register(r"", ProductionViewSet, basename="production")

urlpatterns = [
    path("", include(router.urls)),
]
