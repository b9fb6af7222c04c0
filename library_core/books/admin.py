# library_core/books/admin.py
from django.contrib import admin

from library_core.books.models import Book


@admin.register(Book)
class BookAdmin(admin.ModelAdmin):
    list_display = ("id", "title", "author", "publisher", "genre", "status", "availability")
    list_filter = ("status", "genre")
    search_fields = ("title", "author", "publisher")
    readonly_fields = ("deleted_at", "restored_at", "created_at", "updated_at")
    list_select_related = ("status", "genre")
