# dc_core/common/permissions.py

from __future__ import annotations

from typing import Set

from rest_framework.permissions import BasePermission, SAFE_METHODS

# Group/role names (Django auth Group names; mirrored by Staff.role)
ROLE_ADMIN = "ADMIN"
ROLE_DENTIST = "DENTIST"
ROLE_RECEPTIONIST = "RECEPTIONIST"

ALL_ROLES = (ROLE_ADMIN, ROLE_DENTIST, ROLE_RECEPTIONIST)
CLINICAL = {ROLE_ADMIN, ROLE_DENTIST, ROLE_RECEPTIONIST}


def _user_roles(user) -> Set[str]:
    """
    Resolve roles from:
    1) superuser flag (treated as ADMIN)
    2) Django groups: user.groups
    3) the active Staff profile linked through Staff.user_id

    Returns set of role strings (empty when the user has no clinic role).
    """
    roles: Set[str] = set()

    if not user or not getattr(user, "is_authenticated", False):
        return roles

    if getattr(user, "is_superuser", False):
        roles.add(ROLE_ADMIN)
        return roles

    if hasattr(user, "groups"):
        roles.update(user.groups.values_list("name", flat=True))

    from dc_core.staff.models import Staff

    staff_role = (
        Staff.objects.filter(user_id=user.id, is_active=True)
        .values_list("role", flat=True)
        .first()
    )
    if staff_role:
        roles.add(str(staff_role))

    return roles & set(ALL_ROLES)


class BaseRolePermission(BasePermission):
    """
    Base permission class for role-based access control.

    Key behavior:
    - Requires authentication (the global IsAuthenticated already does this).
    - ADMIN bypass.
    - Uses allowed_roles_per_action for strict RBAC.
    - If action is unknown and request is SAFE, fall back to list/retrieve
      instead of denying.
    """
    message = "You do not have permission to perform this action."

    # Override in subclasses: dict of action -> set of allowed roles
    allowed_roles_per_action = {
        "list": CLINICAL,
        "retrieve": CLINICAL,
        "create": {ROLE_ADMIN},
        "update": {ROLE_ADMIN},
        "partial_update": {ROLE_ADMIN},
        "destroy": {ROLE_ADMIN},
    }

    def _infer_action(self, request, view) -> str | None:
        action = getattr(view, "action", None)
        if action:
            return action

        kwargs = getattr(view, "kwargs", {}) or {}
        is_detail = "pk" in kwargs or "id" in kwargs

        method = request.method.upper()
        if method in ("GET", "HEAD", "OPTIONS"):
            return "retrieve" if is_detail else "list"
        if method == "POST":
            return "create"
        if method == "PUT":
            return "update"
        if method == "PATCH":
            return "partial_update"
        if method == "DELETE":
            return "destroy"
        return None

    def has_permission(self, request, view) -> bool:
        user = request.user
        if not user or not getattr(user, "is_authenticated", False):
            return False

        roles = _user_roles(user)

        if ROLE_ADMIN in roles:
            return True

        action = self._infer_action(request, view)
        allowed = self.allowed_roles_per_action.get(action)

        if allowed is None and request.method in SAFE_METHODS:
            kwargs = getattr(view, "kwargs", {}) or {}
            is_detail = "pk" in kwargs or "id" in kwargs
            read_action = "retrieve" if is_detail else "list"
            allowed = self.allowed_roles_per_action.get(read_action)

        if allowed is not None:
            return bool(roles & allowed)

        # Unknown action => deny by default
        return False

    def has_object_permission(self, request, view, obj) -> bool:
        return self.has_permission(request, view)


class StaffPermission(BaseRolePermission):
    """Staff directory: everyone reads, only admins manage accounts."""
    allowed_roles_per_action = {
        "list": CLINICAL,
        "retrieve": CLINICAL,
        "dentists": CLINICAL,
        "create": {ROLE_ADMIN},
        "update": {ROLE_ADMIN},
        "partial_update": {ROLE_ADMIN},
        "destroy": {ROLE_ADMIN},
    }


class PatientPermission(BaseRolePermission):
    allowed_roles_per_action = {
        "list": CLINICAL,
        "retrieve": CLINICAL,
        "create": CLINICAL,
        "update": CLINICAL,
        "partial_update": CLINICAL,
        "destroy": {ROLE_ADMIN},
        "bulk_delete": {ROLE_ADMIN},
    }


class AppointmentPermission(BaseRolePermission):
    allowed_roles_per_action = {
        "list": CLINICAL,
        "retrieve": CLINICAL,
        "create": CLINICAL,
        "update": CLINICAL,
        "partial_update": CLINICAL,
        "destroy": {ROLE_ADMIN, ROLE_RECEPTIONIST},
        "set_status": CLINICAL,
        "check_conflict": CLINICAL,
    }


class QueuePermission(BaseRolePermission):
    allowed_roles_per_action = {
        "list": CLINICAL,
        "retrieve": CLINICAL,
        "create": CLINICAL,
        "update": CLINICAL,
        "partial_update": CLINICAL,
        "destroy": {ROLE_ADMIN, ROLE_RECEPTIONIST},
        "set_status": CLINICAL,
        "assign": {ROLE_ADMIN, ROLE_RECEPTIONIST},
        "weekly_completions": CLINICAL,
    }


class NotificationPermission(BaseRolePermission):
    allowed_roles_per_action = {
        "list": CLINICAL,
        "retrieve": CLINICAL,
        "create": {ROLE_ADMIN, ROLE_RECEPTIONIST},
        "partial_update": {ROLE_ADMIN, ROLE_RECEPTIONIST},
        "appointment_reminder": {ROLE_ADMIN, ROLE_RECEPTIONIST},
        "staff": {ROLE_ADMIN, ROLE_RECEPTIONIST},
        "bulk": {ROLE_ADMIN},
        "destroy": {ROLE_ADMIN},
    }
