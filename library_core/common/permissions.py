# library_core/common/permissions.py

from __future__ import annotations

from typing import Set

from rest_framework.permissions import BasePermission, SAFE_METHODS

# Values of User.role
ROLE_ADMIN = "admin"
ROLE_LIBRARIAN = "librarian"
ROLE_USER = "user"

STAFF_ROLES = {ROLE_ADMIN, ROLE_LIBRARIAN}
ALL_ROLES = {ROLE_ADMIN, ROLE_LIBRARIAN, ROLE_USER}


def _user_roles(user) -> Set[str]:
    """
    Resolve roles from the user.role attribute.

    Returns set of role strings.

    Default behavior:
    - Superusers are treated as admin.
    - Authenticated users without a role are treated as plain readers.
    """
    roles: Set[str] = set()

    if not user or not getattr(user, "is_authenticated", False):
        return roles

    if getattr(user, "is_superuser", False):
        roles.add(ROLE_ADMIN)
        return roles

    if getattr(user, "role", None):
        roles.add(str(user.role))

    if not roles:
        roles.add(ROLE_USER)

    return roles


def is_staff_reader(user) -> bool:
    """
    Staff (admin/librarian) also see soft-deleted rows; plain users only see active ones.
    """
    return bool(_user_roles(user) & STAFF_ROLES)


# Router action implied by an HTTP method when the view sets none.
ACTION_BY_METHOD = {
    "POST": "create",
    "PUT": "update",
    "PATCH": "partial_update",
    "DELETE": "destroy",
}


def _is_detail(view) -> bool:
    kwargs = getattr(view, "kwargs", None) or {}
    return "pk" in kwargs or "id" in kwargs


class BaseRolePermission(BasePermission):
    """
    Role gate keyed by viewset action.

    Admins pass everything. Other roles need an entry in allowed_roles_per_action;
    reads without one fall back to the list/retrieve entry and anything else is denied.
    """
    message = "No tiene permisos para realizar esta acción."

    allowed_roles_per_action: dict[str, set[str]] = {}

    def _action_name(self, request, view) -> str | None:
        if getattr(view, "action", None):
            return view.action
        if request.method in SAFE_METHODS:
            return "retrieve" if _is_detail(view) else "list"
        return ACTION_BY_METHOD.get(request.method.upper())

    def has_permission(self, request, view) -> bool:
        roles = _user_roles(request.user)
        if not roles:
            return False
        if ROLE_ADMIN in roles:
            return True

        rules = self.allowed_roles_per_action
        allowed = rules.get(self._action_name(request, view))
        if allowed is None and request.method in SAFE_METHODS:
            allowed = rules.get("retrieve" if _is_detail(view) else "list")
        return bool(allowed and roles & allowed)


class AdminOnlyPermission(BaseRolePermission):
    """Users, statuses and audit reports"""
    allowed_roles_per_action: dict[str, set[str]] = {}


class BookPermission(BaseRolePermission):
    allowed_roles_per_action = {
        "list": ALL_ROLES,
        "retrieve": ALL_ROLES,
        "search": ALL_ROLES,
        "export_csv": ALL_ROLES,
        "create": STAFF_ROLES,
        "update": STAFF_ROLES,
        "partial_update": STAFF_ROLES,
        "destroy": STAFF_ROLES,
        "restore": STAFF_ROLES,
        "upload_image": STAFF_ROLES,
    }


class GenrePermission(BaseRolePermission):
    allowed_roles_per_action = {
        "list": ALL_ROLES,
        "retrieve": ALL_ROLES,
        "search": ALL_ROLES,
        "create": STAFF_ROLES,
        "update": STAFF_ROLES,
        "partial_update": STAFF_ROLES,
        "destroy": STAFF_ROLES,
        "restore": {ROLE_ADMIN},
    }
