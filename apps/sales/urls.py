from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import SaleViewSet

router = DefaultRouter()
router.register("sales", SaleViewSet)

urlpatterns = [
    path("", include(router.urls)),
]
