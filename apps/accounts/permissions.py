from rest_framework.permissions import BasePermission


class IsShopAdmin(BasePermission):
    message = "Insufficient permissions"

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and getattr(user, "is_shop_admin", False))
