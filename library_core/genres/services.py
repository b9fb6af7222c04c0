# library_core/genres/services.py
from __future__ import annotations

from typing import Any

from django.db import IntegrityError, transaction

from library_core.audit.entries import Actor
from library_core.audit.recorder import get_audit_recorder
from library_core.common.api.exceptions import ConflictError
from library_core.genres.models import Genre
from library_core.genres.selectors import find_by_name, get_genre
from library_core.statuses.services import StatusLifecycle

NAME_TAKEN = "Ya existe un género con ese nombre"
NAME_TAKEN_DELETED = (
    "Ya existe un género con ese nombre, pero se encuentra eliminado. "
    "Use el endpoint de restauración para activarlo nuevamente."
)


def genre_snapshot(genre: Genre) -> dict[str, Any]:
    return {
        "id": genre.pk,
        "name": genre.name,
        "description": genre.description,
        "status": genre.status_name,
    }


class GenreService:
    @staticmethod
    def _ensure_name_free(name: str, *, exclude_id: int | None = None) -> None:
        existing = find_by_name(name)
        if existing is None or existing.pk == exclude_id:
            return
        raise ConflictError(NAME_TAKEN_DELETED if existing.is_deleted else NAME_TAKEN)

    @staticmethod
    @transaction.atomic
    def create(*, name: str, description: str = "") -> Genre:
        name = name.strip()
        GenreService._ensure_name_free(name)
        try:
            return Genre.objects.create(name=name, description=description or "")
        except IntegrityError:
            raise ConflictError(NAME_TAKEN)

    @staticmethod
    @transaction.atomic
    def update(*, genre_id: int, data: dict, actor: Actor | None = None) -> Genre:
        genre = get_genre(genre_id=genre_id)
        before = genre_snapshot(genre)

        updates = {k: v for k, v in (data or {}).items() if k in ("name", "description")}
        if "name" in updates:
            updates["name"] = updates["name"].strip()
            GenreService._ensure_name_free(updates["name"], exclude_id=genre.pk)

        for k, v in updates.items():
            setattr(genre, k, v)
        genre.save()

        get_audit_recorder().log_data_change("UPDATE", "Genre", genre.pk, before, genre_snapshot(genre), actor=actor)
        return genre

    @staticmethod
    def remove(*, genre_id: int) -> Genre:
        genre = get_genre(genre_id=genre_id)
        return StatusLifecycle.soft_delete(
            genre, conflict_message=f"El género con ID {genre_id} ya se encuentra eliminado"
        )

    @staticmethod
    def restore(*, genre_id: int) -> Genre:
        genre = get_genre(genre_id=genre_id)
        return StatusLifecycle.restore(
            genre, conflict_message=f"El género con ID {genre_id} no se encuentra eliminado"
        )
