# library_core/books/selectors.py
from __future__ import annotations

from django.db.models import QuerySet
from rest_framework.exceptions import NotFound

from library_core.books.models import Book
from library_core.common.search import active_first
from library_core.statuses.models import STATUS_ACTIVE


def books_qs(*, active_only: bool = False) -> QuerySet[Book]:
    qs = Book.objects.select_related("status", "genre")
    if active_only:
        qs = qs.filter(status__name=STATUS_ACTIVE)
    return qs


def get_book(*, book_id: int, active_only: bool = False) -> Book:
    book = books_qs(active_only=active_only).filter(pk=book_id).first()
    if book is None:
        raise NotFound(f"Libro con ID {book_id} no encontrado.")
    return book


def list_books(*, active_only: bool = False) -> QuerySet[Book]:
    return books_qs(active_only=active_only).order_by(*active_first("title"))


def find_by_natural_key(*, title: str, publisher: str) -> Book | None:
    return books_qs().filter(title__iexact=title.strip(), publisher__iexact=publisher.strip()).first()
