# library_core/common/search.py
from __future__ import annotations

from django.apps import apps
from django.conf import settings
from django.db import connection
from django.db.models import Case, IntegerField, Q, Value, When
from django.db.models.functions import Lower

from library_core.statuses.models import STATUS_DELETED


def unaccent_enabled() -> bool:
    """
    Accent-insensitive lookups need PostgreSQL, django.contrib.postgres and the unaccent extension.
    """
    return (
        bool(getattr(settings, "LIBRARY_UNACCENT_SEARCH", False))
        and connection.vendor == "postgresql"
        and apps.is_installed("django.contrib.postgres")
    )


def text_contains(field: str, value: str | None) -> Q:
    """
    Case-insensitive partial match; also accent-insensitive when available.
    Blank values match everything.
    """
    qv = (value or "").strip()
    if not qv:
        return Q()
    lookup = "unaccent__icontains" if unaccent_enabled() else "icontains"
    return Q(**{f"{field}__{lookup}": qv})


def active_first(sort_field: str) -> list:
    """
    Ordering for lifecycle rows: active before deleted, then case-insensitive sort_field, then id.
    """
    status_rank = Case(
        When(status__name=STATUS_DELETED, then=Value(1)),
        default=Value(0),
        output_field=IntegerField(),
    )
    return [status_rank.asc(), Lower(sort_field).asc(), "id"]
