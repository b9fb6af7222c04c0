# library_core/books/apps.py
from django.apps import AppConfig


class BooksConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "library_core.books"
    label = "books"
