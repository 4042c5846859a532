"""
Custom permission classes for role based access control.

These are coarse role gates applied per endpoint.  Whether an actor may
touch a particular patient's data is decided by
``portal.services.access``.
"""
from rest_framework.permissions import BasePermission

from .models import User


class HasRole(BasePermission):
    """Allow access only to authenticated users holding one of ``roles``."""
    roles: frozenset = frozenset()
    message = 'Access denied'

    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        user = getattr(request, "user", None)
        return bool(user and user.is_authenticated and getattr(user, "role", None) in self.roles)


class IsPatient(HasRole):
    roles = frozenset({User.ROLE_PATIENT})
    message = 'Only patients can perform this action'


class IsDoctor(HasRole):
    roles = frozenset({User.ROLE_DOCTOR})
    message = 'Only doctors can perform this action'


class IsReceptionAgent(HasRole):
    roles = frozenset({User.ROLE_RECEPTION_AGENT})
    message = 'Only reception agents can perform this action'


class IsAdmin(HasRole):
    roles = frozenset({User.ROLE_ADMIN})
    message = 'Admin access required'


class IsReceptionOrAdmin(HasRole):
    """Reception agents and admins may provision patient accounts."""
    roles = frozenset({User.ROLE_RECEPTION_AGENT, User.ROLE_ADMIN})
    message = 'Only reception agents and admins can add patients'
