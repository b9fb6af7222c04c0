# library_core/books/models.py
from __future__ import annotations

from django.db import models

from library_core.common.models import LifecycleModel


class Book(LifecycleModel):
    """
    Catalogue entry. (title, publisher) is the natural key across active and deleted rows.
    """
    title = models.CharField(max_length=255)
    author = models.CharField(max_length=255)
    publisher = models.CharField(max_length=255)
    price = models.PositiveIntegerField()
    availability = models.PositiveIntegerField(default=0)
    image_url = models.CharField(max_length=500, blank=True, null=True)

    genre = models.ForeignKey("genres.Genre", on_delete=models.PROTECT, related_name="books")

    class Meta:
        verbose_name = "libro"
        verbose_name_plural = "libros"
        constraints = [
            models.UniqueConstraint(fields=["title", "publisher"], name="uniq_book_title_publisher"),
        ]
        indexes = [
            models.Index(fields=["title"], name="books_title_idx"),
            models.Index(fields=["author"], name="books_author_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.title} ({self.publisher})"
