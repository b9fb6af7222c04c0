# library_core/users/services.py
from __future__ import annotations

from typing import Any

from django.db import IntegrityError, transaction
from rest_framework.exceptions import AuthenticationFailed

from library_core.audit.entries import Actor
from library_core.audit.recorder import get_audit_recorder
from library_core.common.api.exceptions import ConflictError
from library_core.statuses.services import StatusLifecycle
from library_core.users.models import User
from library_core.users.selectors import find_by_email, get_user

EMAIL_TAKEN = "El email ya está registrado"
EMAIL_TAKEN_DELETED = (
    "El email ya está registrado, pero la cuenta se encuentra eliminada. "
    "Use el endpoint de restauración para activarla nuevamente."
)

UPDATABLE_FIELDS = ("name", "email", "age", "role")


def user_snapshot(user: User) -> dict[str, Any]:
    """Audit view of a user. Never includes the password hash."""
    return {
        "id": user.pk,
        "email": user.email,
        "name": user.name,
        "age": user.age,
        "role": user.role,
        "status": user.status_name,
    }


class UserService:
    @staticmethod
    def _ensure_email_free(email: str, *, exclude_id: int | None = None) -> None:
        existing = find_by_email(email)
        if existing is None or existing.pk == exclude_id:
            return
        raise ConflictError(EMAIL_TAKEN_DELETED if existing.is_deleted else EMAIL_TAKEN)

    @staticmethod
    @transaction.atomic
    def create(
        *,
        email: str,
        name: str,
        password: str,
        role: str | None = None,
        age: int | None = None,
    ) -> User:
        UserService._ensure_email_free(email)

        extra: dict[str, Any] = {"name": name, "age": age}
        if role:
            extra["role"] = role

        try:
            return User.objects.create_user(email=email, password=password, **extra)
        except IntegrityError:
            # Lost a race against a concurrent registration of the same email.
            raise ConflictError(EMAIL_TAKEN)

    @staticmethod
    @transaction.atomic
    def update(*, user_id: int, data: dict, actor: Actor | None = None) -> User:
        user = get_user(user_id=user_id)
        before = user_snapshot(user)

        updates = {k: v for k, v in (data or {}).items() if k in UPDATABLE_FIELDS}
        if "email" in updates:
            updates["email"] = updates["email"].strip().lower()
            UserService._ensure_email_free(updates["email"], exclude_id=user.pk)

        for k, v in updates.items():
            setattr(user, k, v)
        user.save()

        get_audit_recorder().log_data_change("UPDATE", "User", user.pk, before, user_snapshot(user), actor=actor)
        return user

    @staticmethod
    @transaction.atomic
    def change_password(*, user_id: int, current_password: str, new_password: str) -> None:
        user = get_user(user_id=user_id)
        if not user.check_password(current_password):
            raise AuthenticationFailed("La contraseña actual es incorrecta")

        user.set_password(new_password)
        user.save(update_fields=["password", "updated_at"])

    @staticmethod
    def remove(*, user_id: int) -> User:
        user = get_user(user_id=user_id)
        return StatusLifecycle.soft_delete(
            user, conflict_message=f"El usuario con ID {user_id} ya se encuentra eliminado"
        )

    @staticmethod
    def restore(*, user_id: int) -> User:
        user = get_user(user_id=user_id)
        return StatusLifecycle.restore(
            user, conflict_message=f"El usuario con ID {user_id} no se encuentra eliminado"
        )
