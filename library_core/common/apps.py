# library_core/common/apps.py
from django.apps import AppConfig


class CommonConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "library_core.common"

    def ready(self):
        from library_core.common.logging import configure_structlog

        configure_structlog()
