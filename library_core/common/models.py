# library_core/common/models.py
from __future__ import annotations

from django.db import models

from library_core.statuses.models import STATUS_DELETED
from library_core.statuses.selectors import default_status_id


class TimeStampedModel(models.Model):
    """
    Standard timestamps for all entities.
    """
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class LifecycleModel(TimeStampedModel):
    """
    Soft-delete lifecycle shared by books, genres and users.

    Rows are never destroyed: StatusLifecycle moves them between the
    "activo" and "eliminado" statuses and stamps deleted_at / restored_at.
    Only the owning domain service may write these three fields.
    """
    status = models.ForeignKey(
        "statuses.Status",
        on_delete=models.PROTECT,
        related_name="+",
        default=default_status_id,
    )
    deleted_at = models.DateTimeField(null=True, blank=True)
    restored_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        abstract = True

    @property
    def status_name(self) -> str:
        return self.status.name

    @property
    def is_deleted(self) -> bool:
        return self.status.name == STATUS_DELETED
