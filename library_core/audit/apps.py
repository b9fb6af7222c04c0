# library_core/audit/apps.py
from __future__ import annotations

from django.apps import AppConfig


def _reset_audit_singletons(*, setting, **kwargs) -> None:
    if setting != "LIBRARY_AUDIT":
        return

    from library_core.audit.recorder import get_audit_recorder
    from library_core.audit.sink import get_log_sink

    get_log_sink.cache_clear()
    get_audit_recorder.cache_clear()


class AuditConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "library_core.audit"
    label = "audit"

    def ready(self) -> None:
        from django.test.signals import setting_changed

        setting_changed.connect(_reset_audit_singletons, dispatch_uid="audit.reset_audit_singletons")
