# activity/urls.py

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from activity.views import ActivityLogViewSet

router = DefaultRouter()
router.register(r"", ActivityLogViewSet, basename="activity")

urlpatterns = [
    path("", include(router.urls)),
]
