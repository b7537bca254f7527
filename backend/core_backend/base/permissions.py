"""
Permissions shared across apps.

Users and drivers are referenced by opaque string ids on the domain models;
``user_id_for`` derives that id from the authenticated Django user.
"""

from rest_framework.permissions import BasePermission


def user_id_for(request):
    user = getattr(request, "user", None)
    if user is None or not user.is_authenticated:
        return None
    return str(user.pk)


def is_staff(request) -> bool:
    user = getattr(request, "user", None)
    return bool(user and user.is_authenticated and (user.is_staff or user.is_superuser))


class IsStaffMember(BasePermission):
    """
    Permission for dispatch and back-office operations.
    Only staff members and superusers pass.
    """

    def has_permission(self, request, view):
        return is_staff(request)


class IsOwnerOrStaff(BasePermission):
    """
    Object-level permission: staff can access anything, everyone else only
    objects whose ``user_id`` matches their own.
    """

    def has_object_permission(self, request, view, obj):
        if is_staff(request):
            return True
        return obj.user_id is not None and obj.user_id == user_id_for(request)
