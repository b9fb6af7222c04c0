# library_core/statuses/admin.py
from django.contrib import admin

from library_core.statuses.models import Status


@admin.register(Status)
class StatusAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "created_at")
    ordering = ("id",)
