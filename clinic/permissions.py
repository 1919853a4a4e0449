"""
Role based permissions for the two front-ends.

Staff use the dashboard with the ``admin`` role, everyone who books
through the portal is a ``patient``.
"""
from rest_framework.permissions import BasePermission, SAFE_METHODS

from .models import User


def has_role(user, role: str) -> bool:
    return bool(user and user.is_authenticated and getattr(user, "role", None) == role)


def is_admin(user) -> bool:
    return has_role(user, User.ROLE_ADMIN)


class IsAdminRole(BasePermission):
    """Clinic staff only."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        return is_admin(getattr(request, "user", None))


class IsPatientRole(BasePermission):
    """Patients only (booking)."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        return has_role(getattr(request, "user", None), User.ROLE_PATIENT)


class IsAdminOrReadOnly(BasePermission):
    """Any signed-in user may read; writes need the admin role."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        user = getattr(request, "user", None)
        if request.method in SAFE_METHODS:
            return bool(user and user.is_authenticated)
        return is_admin(user)
