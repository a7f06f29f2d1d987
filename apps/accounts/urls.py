from django.urls import include, path
from rest_framework.routers import DefaultRouter
from rest_framework_simplejwt.views import TokenRefreshView

from .views import LoginView, UserViewSet, change_password, profile

router = DefaultRouter()
router.register("users", UserViewSet)

urlpatterns = [
    path("auth/login/", LoginView.as_view(), name="token_obtain_pair"),
    path("auth/refresh/", TokenRefreshView.as_view(), name="token_refresh"),
    path("auth/profile/", profile, name="profile"),
    path("auth/change-password/", change_password, name="change-password"),
    path("", include(router.urls)),
]
