# library_core/genres/apps.py
from django.apps import AppConfig


class GenresConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "library_core.genres"
    label = "genres"
