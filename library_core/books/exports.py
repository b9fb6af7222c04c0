# library_core/books/exports.py
from __future__ import annotations

from datetime import date, datetime
from typing import Any, Iterable

from django.utils import timezone

from library_core.books.models import Book

CSV_HEADER = (
    "ID",
    "Título",
    "Autor",
    "Editorial",
    "Precio",
    "Género",
    "Estado",
    "Disponibilidad",
    "Fecha Creación",
    "Fecha Actualización",
)


def csv_text(value: Any) -> str:
    """Quoted text cell; internal quotes are doubled."""
    text = "" if value is None else str(value)
    return '"' + text.replace('"', '""') + '"'


def csv_date(value: date | datetime | None) -> str:
    if value is None:
        return ""
    if isinstance(value, datetime):
        value = timezone.localtime(value) if timezone.is_aware(value) else value
        value = value.date()
    return value.isoformat()


def book_row(book: Book) -> str:
    cells = [
        str(book.pk),
        csv_text(book.title),
        csv_text(book.author),
        csv_text(book.publisher),
        str(book.price),
        csv_text(book.genre.name if book.genre_id else ""),
        csv_text(book.status.name),
        str(book.availability),
        csv_date(book.created_at),
        csv_date(book.updated_at),
    ]
    return ",".join(cells)


def books_to_csv(books: Iterable[Book]) -> str:
    lines = [",".join(CSV_HEADER)]
    lines.extend(book_row(book) for book in books)
    return "\n".join(lines) + "\n"
