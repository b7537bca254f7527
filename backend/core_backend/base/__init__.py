"""
Core backend base components.

Shared filter and permission building blocks used by the app views.
"""

from .filters import BaseFilterSet, FlexibleDateTimeFilter
from .permissions import IsOwnerOrStaff, IsStaffMember, user_id_for

__all__ = [
    # Filters
    "BaseFilterSet",
    "FlexibleDateTimeFilter",
    # Permissions
    "IsOwnerOrStaff",
    "IsStaffMember",
    "user_id_for",
]
