# library_core/users/admin.py
from django.contrib import admin

from library_core.users.models import User


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ("id", "email", "name", "role", "status", "created_at")
    list_filter = ("role", "status")
    search_fields = ("email", "name")
    readonly_fields = ("password", "last_login", "deleted_at", "restored_at", "created_at", "updated_at")
    ordering = ("-created_at",)
