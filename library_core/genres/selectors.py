# library_core/genres/selectors.py
from __future__ import annotations

from django.db.models import QuerySet
from rest_framework.exceptions import NotFound

from library_core.common.search import active_first, text_contains
from library_core.genres.models import Genre
from library_core.statuses.models import STATUS_ACTIVE


def genres_qs(*, active_only: bool = False) -> QuerySet[Genre]:
    qs = Genre.objects.select_related("status")
    if active_only:
        qs = qs.filter(status__name=STATUS_ACTIVE)
    return qs


def get_genre(*, genre_id: int, active_only: bool = False) -> Genre:
    genre = genres_qs(active_only=active_only).filter(pk=genre_id).first()
    if genre is None:
        raise NotFound(f"Género con ID {genre_id} no encontrado")
    return genre


def list_genres(*, active_only: bool = False) -> QuerySet[Genre]:
    return genres_qs(active_only=active_only).order_by("name", "id")


def search_genres(*, name: str | None = None, status: str | None = None, active_only: bool = False) -> QuerySet[Genre]:
    qs = genres_qs(active_only=active_only).filter(text_contains("name", name))
    if status:
        qs = qs.filter(status__name=status)
    return qs.order_by(*active_first("name"))


def find_by_name(name: str) -> Genre | None:
    return genres_qs().filter(name__iexact=(name or "").strip()).first()
