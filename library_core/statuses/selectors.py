# library_core/statuses/selectors.py
from __future__ import annotations

import structlog
from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from django.db.models import QuerySet

from library_core.statuses.models import STATUS_ACTIVE, STATUS_DELETED, Status

logger = structlog.get_logger(__name__)

DEFAULT_FALLBACK_IDS = {STATUS_ACTIVE: 1, STATUS_DELETED: 2}


class StatusSelector:
    class NotFound(Exception):
        pass

    @staticmethod
    def list_statuses() -> QuerySet[Status]:
        return Status.objects.all().order_by("id")

    @staticmethod
    def get_by_name(name: str) -> Status:
        try:
            return Status.objects.get(name=name)
        except Status.DoesNotExist:
            raise StatusSelector.NotFound(name)

    @staticmethod
    def resolve_id(name: str) -> int:
        """
        Look the status up by its well-known name.

        When the row is missing, fall back to LIBRARY_STATUS_FALLBACK_IDS[name].
        A fallback of None means the deployment wants a hard failure instead.
        """
        status_id = Status.objects.filter(name=name).values_list("id", flat=True).first()
        if status_id is not None:
            return status_id

        fallbacks = getattr(settings, "LIBRARY_STATUS_FALLBACK_IDS", DEFAULT_FALLBACK_IDS)
        fallback_id = fallbacks.get(name)
        if fallback_id is None:
            raise ImproperlyConfigured(
                f'Status "{name}" does not exist and no fallback id is configured. '
                "Run `manage.py ensure_statuses`."
            )

        logger.warning("status_lookup_fallback", status=name, fallback_id=fallback_id)
        return fallback_id

    @staticmethod
    def resolve_active_id() -> int:
        return StatusSelector.resolve_id(STATUS_ACTIVE)

    @staticmethod
    def resolve_deleted_id() -> int:
        return StatusSelector.resolve_id(STATUS_DELETED)


def default_status_id() -> int:
    """
    Field default for LifecycleModel.status: new rows start active.
    """
    return StatusSelector.resolve_active_id()
