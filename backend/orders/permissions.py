from rest_framework import permissions

from core_backend.base.permissions import is_staff, user_id_for


class CanViewOrder(permissions.BasePermission):
    """
    Object permission for a single order:
    - Staff users can access any order
    - Authenticated users can access their own orders
    - Guest orders (no user) are reachable by anyone holding the order id
    """

    def has_object_permission(self, request, view, obj):
        if is_staff(request):
            return True
        if obj.user_id is None:
            return True
        return obj.user_id == user_id_for(request)
