"""
Role based permission classes.

Failures raise instead of returning ``False`` so the caller sees the
directory's own 401/403 messages.
"""
from rest_framework.permissions import SAFE_METHODS, BasePermission

from registry.models import Role
from registry.services.access import AccessGuard


class RoleAllowList(BasePermission):
    """Authenticated identity whose role is in ``allowed_roles`` (empty means any)."""
    allowed_roles: frozenset = frozenset()

    def has_permission(self, request, view) -> bool:
        AccessGuard.check_roles(getattr(request, 'user', None), self.allowed_roles)
        return True


class IsAuthenticatedIdentity(RoleAllowList):
    pass


class IsAdminRole(RoleAllowList):
    allowed_roles = frozenset({Role.ADMIN.value})


class AdminWriteOrReadOnly(IsAdminRole):
    """Anyone may read; writes need an Admin."""
    def has_permission(self, request, view) -> bool:
        if request.method in SAFE_METHODS:
            return True
        return super().has_permission(request, view)
