from rest_framework import permissions

from core_backend.base.permissions import is_staff, user_id_for


class CanViewDelivery(permissions.BasePermission):
    """
    Object permission for a single delivery:
    - Staff users can see any delivery
    - The assigned driver can see their delivery
    - The customer who placed the order can track it
    """

    def has_object_permission(self, request, view, obj):
        if is_staff(request):
            return True
        caller = user_id_for(request)
        if caller is None:
            return False
        return caller in (obj.driver_id, obj.order.user_id)
