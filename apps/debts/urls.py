from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import DebtViewSet

router = DefaultRouter()
router.register("debts", DebtViewSet)

urlpatterns = [
    path("", include(router.urls)),
]
