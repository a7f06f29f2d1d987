import logging

from django.contrib.auth import get_user_model
from rest_framework import status, viewsets
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework_simplejwt.views import TokenObtainPairView

from .permissions import IsShopAdmin
from .serializers import ChangePasswordSerializer, LoginSerializer, ProfileSerializer, UserSerializer

logger = logging.getLogger(__name__)
User = get_user_model()


class LoginView(TokenObtainPairView):
    serializer_class = LoginSerializer


@api_view(["GET", "PUT", "PATCH"])
@permission_classes([IsAuthenticated])
def profile(request):
    if request.method == "GET":
        return Response(ProfileSerializer(request.user).data)
    serializer = ProfileSerializer(request.user, data=request.data, partial=request.method == "PATCH")
    serializer.is_valid(raise_exception=True)
    serializer.save()
    return Response(serializer.data)


@api_view(["POST", "PUT"])
@permission_classes([IsAuthenticated])
def change_password(request):
    serializer = ChangePasswordSerializer(data=request.data, context={"request": request})
    serializer.is_valid(raise_exception=True)
    request.user.set_password(serializer.validated_data["new_password"])
    request.user.save(update_fields=["password"])
    logger.info("Password changed for user %s", request.user.username)
    return Response({"message": "Password changed successfully"})


class UserViewSet(viewsets.ModelViewSet):
    queryset = User.objects.all().order_by("-created_at")
    serializer_class = UserSerializer
    permission_classes = [IsShopAdmin]

    def perform_destroy(self, instance):
        if instance.pk == self.request.user.pk:
            raise ValidationError("You cannot delete your own account")
        instance.delete()

    @action(detail=True, methods=["patch"], url_path="toggle-status")
    def toggle_status(self, request, pk=None):
        user = self.get_object()
        if user.pk == request.user.pk:
            raise ValidationError("You cannot deactivate your own account")
        user.is_active = not user.is_active
        user.save(update_fields=["is_active", "updated_at"])
        state = "activated" if user.is_active else "deactivated"
        logger.info("User %s %s by %s", user.username, state, request.user.username)
        return Response(
            {"message": f"User {state} successfully", "user": UserSerializer(user).data},
            status=status.HTTP_200_OK,
        )
