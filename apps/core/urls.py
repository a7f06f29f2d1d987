from django.urls import path

from .views import health

urlpatterns = [
    path("monitoring/health/", health, name="health"),
]
