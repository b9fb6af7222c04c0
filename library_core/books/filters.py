# library_core/books/filters.py
from __future__ import annotations

import django_filters
from django.db.models import QuerySet
from django_filters.utils import translate_validation

from library_core.books.models import Book
from library_core.common.search import active_first, text_contains
from library_core.statuses.models import STATUS_ACTIVE, STATUS_DELETED


class BookFilter(django_filters.FilterSet):
    """
    Query parameters of GET /libros/search/ and /libros/export/csv/.
    Text filters are partial and case-insensitive (accent-insensitive on PostgreSQL).
    """
    titulo = django_filters.CharFilter(field_name="title", method="filter_text")
    autor = django_filters.CharFilter(field_name="author", method="filter_text")
    editorial = django_filters.CharFilter(field_name="publisher", method="filter_text")
    generoId = django_filters.NumberFilter(field_name="genre_id")
    estado = django_filters.ChoiceFilter(
        field_name="status__name",
        choices=[(STATUS_ACTIVE, STATUS_ACTIVE), (STATUS_DELETED, STATUS_DELETED)],
    )

    class Meta:
        model = Book
        fields = ["titulo", "autor", "editorial", "generoId", "estado"]

    def filter_text(self, queryset, name, value):
        return queryset.filter(text_contains(name, value))


def filter_books(params, queryset: QuerySet[Book]) -> QuerySet[Book]:
    """
    Apply BookFilter and the search ordering: active first, then lowercase title.
    """
    f = BookFilter(params, queryset=queryset)
    if not f.is_valid():
        raise translate_validation(f.errors)
    return f.qs.order_by(*active_first("title"))
