# library_core/statuses/services.py
from __future__ import annotations

from typing import TypeVar

from django.db import models, transaction
from django.utils.timezone import now

from library_core.common.api.exceptions import ConflictError
from library_core.statuses.models import STATUS_ACTIVE, STATUS_DELETED, Status
from library_core.statuses.selectors import StatusSelector

M = TypeVar("M", bound=models.Model)


class StatusLifecycle:
    """
    Active/deleted state machine for every LifecycleModel.

    Transitions are a single conditional UPDATE filtered on the current status,
    so two concurrent deletes (or restores) of the same row cannot both succeed:
    the loser sees zero affected rows and gets a ConflictError.

    Does not audit; callers layer that on top.
    """

    @staticmethod
    def _label(instance: models.Model) -> str:
        return str(instance._meta.verbose_name).capitalize()

    @staticmethod
    @transaction.atomic
    def soft_delete(instance: M, *, conflict_message: str | None = None) -> M:
        deleted_id = StatusSelector.resolve_deleted_id()
        ts = now()

        updated = (
            type(instance)._default_manager
            .filter(pk=instance.pk)
            .exclude(status_id=deleted_id)
            .update(status_id=deleted_id, deleted_at=ts, restored_at=None, updated_at=ts)
        )
        if updated != 1:
            raise ConflictError(
                conflict_message
                or f"{StatusLifecycle._label(instance)} con ID {instance.pk} ya se encuentra eliminado"
            )

        instance.refresh_from_db()
        return instance

    @staticmethod
    @transaction.atomic
    def restore(instance: M, *, conflict_message: str | None = None) -> M:
        deleted_id = StatusSelector.resolve_deleted_id()
        active_id = StatusSelector.resolve_active_id()
        ts = now()

        updated = (
            type(instance)._default_manager
            .filter(pk=instance.pk, status_id=deleted_id)
            .update(status_id=active_id, deleted_at=None, restored_at=ts, updated_at=ts)
        )
        if updated != 1:
            raise ConflictError(
                conflict_message
                or f"{StatusLifecycle._label(instance)} con ID {instance.pk} no se encuentra eliminado"
            )

        instance.refresh_from_db()
        return instance

    @staticmethod
    @transaction.atomic
    def ensure_defaults() -> int:
        """
        Idempotently create the two lifecycle statuses. Returns how many were created.
        """
        created = 0
        for name in (STATUS_ACTIVE, STATUS_DELETED):
            _, was_created = Status.objects.get_or_create(name=name)
            created += 1 if was_created else 0
        return created
