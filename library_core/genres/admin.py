# library_core/genres/admin.py
from django.contrib import admin

from library_core.genres.models import Genre


@admin.register(Genre)
class GenreAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "status", "created_at")
    list_filter = ("status",)
    search_fields = ("name",)
    readonly_fields = ("deleted_at", "restored_at", "created_at", "updated_at")
