# library_core/users/selectors.py
from __future__ import annotations

from django.db.models import Q, QuerySet
from rest_framework.exceptions import NotFound

from library_core.statuses.models import STATUS_ACTIVE
from library_core.users.models import User


def users_qs() -> QuerySet[User]:
    return User.objects.select_related("status")


def get_user(*, user_id: int) -> User:
    user = users_qs().filter(pk=user_id).first()
    if user is None:
        raise NotFound(f"Usuario con ID {user_id} no encontrado")
    return user


def list_users() -> QuerySet[User]:
    """Newest first."""
    return users_qs().order_by("-created_at", "-id")


def list_active_users() -> QuerySet[User]:
    return users_qs().filter(status__name=STATUS_ACTIVE).order_by("name", "id")


def search_users(*, query: str) -> QuerySet[User]:
    qv = (query or "").strip()
    qs = users_qs()
    if qv:
        qs = qs.filter(Q(name__icontains=qv) | Q(email__icontains=qv))
    return qs.order_by("name", "id")


def find_by_email(email: str) -> User | None:
    return users_qs().filter(email__iexact=(email or "").strip()).first()
