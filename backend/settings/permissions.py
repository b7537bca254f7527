from rest_framework import permissions


class SettingsReadOnlyOrStaff(permissions.BasePermission):
    """
    Custom permission to allow:
    - Read access for all users (including unauthenticated/guests)
    - Write access only for staff users
    """

    def has_permission(self, request, view):
        if request.method in permissions.SAFE_METHODS:
            return True

        if not request.user.is_authenticated:
            return False

        return request.user.is_staff or request.user.is_superuser
