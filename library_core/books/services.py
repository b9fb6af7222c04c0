# library_core/books/services.py
from __future__ import annotations

import os
import uuid
from typing import Any

from django.conf import settings
from django.core.files.storage import default_storage
from django.db import IntegrityError, transaction
from rest_framework.exceptions import ValidationError

from library_core.audit.entries import Actor
from library_core.audit.recorder import get_audit_recorder
from library_core.books.models import Book
from library_core.books.selectors import find_by_natural_key, get_book
from library_core.common.api.exceptions import ConflictError
from library_core.genres.selectors import get_genre
from library_core.statuses.services import StatusLifecycle

BOOK_EXISTS = "Ya existe un libro con ese título y editorial"
BOOK_EXISTS_DELETED = (
    "Ya existe un libro con ese título y editorial, pero se encuentra eliminado. "
    "Use el endpoint de restauración para activarlo nuevamente."
)

UPDATABLE_FIELDS = ("title", "author", "publisher", "price", "availability", "genre_id")

DEFAULT_IMAGE_SETTINGS = {
    "MAX_BYTES": 5 * 1024 * 1024,
    "ALLOWED_EXTENSIONS": (".jpg", ".jpeg", ".png", ".gif", ".webp"),
    "UPLOAD_DIR": "libros",
}


def book_snapshot(book: Book) -> dict[str, Any]:
    return {
        "id": book.pk,
        "title": book.title,
        "author": book.author,
        "publisher": book.publisher,
        "price": book.price,
        "availability": book.availability,
        "genre_id": book.genre_id,
        "image_url": book.image_url,
        "status": book.status_name,
    }


def _image_settings() -> dict[str, Any]:
    return {**DEFAULT_IMAGE_SETTINGS, **(getattr(settings, "LIBRARY_BOOK_IMAGE", {}) or {})}


class BookService:
    @staticmethod
    def _ensure_natural_key_free(*, title: str, publisher: str, exclude_id: int | None = None) -> None:
        existing = find_by_natural_key(title=title, publisher=publisher)
        if existing is None or existing.pk == exclude_id:
            return
        raise ConflictError(BOOK_EXISTS_DELETED if existing.is_deleted else BOOK_EXISTS)

    @staticmethod
    @transaction.atomic
    def create(
        *,
        title: str,
        author: str,
        publisher: str,
        price: int,
        genre_id: int,
        availability: int = 0,
    ) -> Book:
        title, publisher = title.strip(), publisher.strip()
        BookService._ensure_natural_key_free(title=title, publisher=publisher)

        # Books may only be filed under a genre that is currently active.
        genre = get_genre(genre_id=genre_id, active_only=True)

        try:
            book = Book.objects.create(
                title=title,
                author=author.strip(),
                publisher=publisher,
                price=price,
                availability=availability,
                genre=genre,
            )
        except IntegrityError:
            raise ConflictError(BOOK_EXISTS)
        return get_book(book_id=book.pk)

    @staticmethod
    @transaction.atomic
    def update(*, book_id: int, data: dict, actor: Actor | None = None) -> Book:
        book = get_book(book_id=book_id)
        before = book_snapshot(book)

        updates = {k: v for k, v in (data or {}).items() if k in UPDATABLE_FIELDS}
        if "genre_id" in updates:
            get_genre(genre_id=updates["genre_id"], active_only=True)

        if "title" in updates or "publisher" in updates:
            BookService._ensure_natural_key_free(
                title=updates.get("title", book.title),
                publisher=updates.get("publisher", book.publisher),
                exclude_id=book.pk,
            )

        for k, v in updates.items():
            setattr(book, k, v.strip() if isinstance(v, str) else v)

        try:
            book.save()
        except IntegrityError:
            raise ConflictError(BOOK_EXISTS)

        book = get_book(book_id=book.pk)
        get_audit_recorder().log_data_change("UPDATE", "Book", book.pk, before, book_snapshot(book), actor=actor)
        return book

    @staticmethod
    def remove(*, book_id: int) -> Book:
        book = get_book(book_id=book_id)
        return StatusLifecycle.soft_delete(
            book, conflict_message=f"El libro con ID {book_id} ya se encuentra eliminado"
        )

    @staticmethod
    def restore(*, book_id: int) -> Book:
        book = get_book(book_id=book_id)
        return StatusLifecycle.restore(
            book, conflict_message=f"El libro con ID {book_id} no se encuentra eliminado"
        )

    @staticmethod
    @transaction.atomic
    def update_image(*, book_id: int, upload) -> Book:
        """
        Store an uploaded cover under <UPLOAD_DIR>/ in the default storage and
        point image_url at its public URL.
        """
        cfg = _image_settings()
        book = get_book(book_id=book_id)

        if upload is None:
            raise ValidationError({"imagen": "Debe adjuntar un archivo de imagen"})

        ext = os.path.splitext(upload.name or "")[1].lower()
        allowed = tuple(cfg["ALLOWED_EXTENSIONS"])
        if ext not in allowed:
            names = ", ".join(e.lstrip(".") for e in allowed)
            raise ValidationError({"imagen": f"Solo se permiten archivos de imagen ({names})"})

        if upload.size > cfg["MAX_BYTES"]:
            raise ValidationError(
                {"imagen": f"La imagen no puede superar {cfg['MAX_BYTES'] // (1024 * 1024)} MB"}
            )

        name = f"{cfg['UPLOAD_DIR']}/libro-{uuid.uuid4().hex}{ext}"
        stored = default_storage.save(name, upload)

        book.image_url = default_storage.url(stored)
        book.save(update_fields=["image_url", "updated_at"])
        return book
