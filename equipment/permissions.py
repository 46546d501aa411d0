"""
Role based permission classes.
"""
from rest_framework.permissions import BasePermission, SAFE_METHODS

STAFF_ROLES = {"admin", "technician"}


def _role(request):
    user = getattr(request, "user", None)
    if not (user and user.is_authenticated):
        return None
    return getattr(user, "role", None)


class IsAdminRole(BasePermission):
    """Allow access only to administrators."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        return _role(request) == "admin"


class IsStaffRole(BasePermission):
    """Administrators and technicians: the operational endpoints."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        return _role(request) in STAFF_ROLES


class IsPatientRole(BasePermission):
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        return _role(request) == "patient"


class StaffOrReadOnly(BasePermission):
    """Any authenticated user may read; only staff may write."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        role = _role(request)
        if request.method in SAFE_METHODS:
            return role is not None
        return role in STAFF_ROLES
