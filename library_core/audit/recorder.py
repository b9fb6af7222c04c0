# library_core/audit/recorder.py
from __future__ import annotations

import traceback
from datetime import datetime
from functools import lru_cache
from typing import Any, Callable, Mapping, Optional

from django.conf import settings
from django.utils import timezone

from library_core.audit.entries import (
    Actor,
    AuditCategory,
    AuditDetails,
    AuditLogEntry,
    ClientInfo,
    DataChangeDetails,
    LogLevel,
    SystemErrorDetails,
    normalize_details,
)
from library_core.audit.redaction import redact
from library_core.audit.sink import LogSink, get_log_sink

DEFAULT_CRITICAL_OPERATION_MS = 5000


def compute_changes(
    old_data: Optional[Mapping[str, Any]],
    new_data: Optional[Mapping[str, Any]],
) -> Optional[dict[str, dict[str, Any]]]:
    """
    {field: {"from": old, "to": new}} for every key of new_data whose value differs.
    None when either side is missing or nothing changed.
    """
    if old_data is None or new_data is None:
        return None

    changes = {
        key: {"from": old_data.get(key), "to": value}
        for key, value in new_data.items()
        if old_data.get(key) != value
    }
    return changes or None


class AuditRecorder:
    """
    Typed entry points that turn domain events into AuditLogEntry records.

    Policy:
    - success -> info, failure -> warn, security -> warn, system error -> error.
    - details and metadata are redacted before they reach the sink.
    - one sink append per call; sink errors propagate.
    """

    def __init__(
        self,
        sink: LogSink,
        *,
        clock: Callable[[], datetime] = timezone.now,
        critical_operation_ms: int = DEFAULT_CRITICAL_OPERATION_MS,
    ):
        self.sink = sink
        self.clock = clock
        self.critical_operation_ms = critical_operation_ms

    # -------------------------
    # Core
    # -------------------------
    def record(
        self,
        *,
        category: AuditCategory,
        action: str,
        level: LogLevel,
        success: bool = True,
        actor: Optional[Actor] = None,
        client: Optional[ClientInfo] = None,
        resource_type: Optional[str] = None,
        resource_id: Optional[int] = None,
        details: Optional[AuditDetails] = None,
        error_message: Optional[str] = None,
        duration: Optional[int] = None,
        metadata: Optional[Mapping[str, Any]] = None,
    ) -> AuditLogEntry:
        actor = actor or Actor()
        client = client or ClientInfo()

        normalized = normalize_details(details)
        entry = AuditLogEntry(
            timestamp=self.clock(),
            level=level,
            category=category,
            action=action,
            success=success,
            user_id=actor.user_id,
            user_email=actor.email,
            user_role=actor.role,
            resource_id=resource_id,
            resource_type=resource_type,
            details=redact(normalized) if normalized is not None else None,
            ip_address=client.ip_address,
            user_agent=client.user_agent,
            error_message=error_message,
            duration=duration,
            metadata=redact(dict(metadata)) if metadata else None,
        )
        self.sink.append(entry.to_record())
        return entry

    @staticmethod
    def _outcome_level(success: bool) -> LogLevel:
        return LogLevel.INFO if success else LogLevel.WARN

    # -------------------------
    # Category entry points
    # -------------------------
    def audit_auth(
        self,
        action: str,
        *,
        actor: Optional[Actor] = None,
        success: bool = True,
        details: Optional[AuditDetails] = None,
        client: Optional[ClientInfo] = None,
        metadata: Optional[Mapping[str, Any]] = None,
    ) -> AuditLogEntry:
        return self.record(
            category=AuditCategory.AUTH,
            action=action,
            level=self._outcome_level(success),
            success=success,
            actor=actor,
            client=client,
            details=details,
            metadata=metadata,
        )

    def audit_user_management(
        self,
        action: str,
        *,
        actor: Optional[Actor] = None,
        target_user_id: Optional[int] = None,
        success: bool = True,
        details: Optional[AuditDetails] = None,
        client: Optional[ClientInfo] = None,
        metadata: Optional[Mapping[str, Any]] = None,
    ) -> AuditLogEntry:
        return self.record(
            category=AuditCategory.USER_MANAGEMENT,
            action=action,
            level=self._outcome_level(success),
            success=success,
            actor=actor,
            client=client,
            resource_type="User",
            resource_id=target_user_id,
            details=details,
            metadata=metadata,
        )

    def audit_book_management(
        self,
        action: str,
        *,
        actor: Optional[Actor] = None,
        book_id: Optional[int] = None,
        success: bool = True,
        details: Optional[AuditDetails] = None,
        client: Optional[ClientInfo] = None,
        metadata: Optional[Mapping[str, Any]] = None,
    ) -> AuditLogEntry:
        return self.record(
            category=AuditCategory.BOOK_MANAGEMENT,
            action=action,
            level=self._outcome_level(success),
            success=success,
            actor=actor,
            client=client,
            resource_type="Book",
            resource_id=book_id,
            details=details,
            metadata=metadata,
        )

    def audit_genre_management(
        self,
        action: str,
        *,
        actor: Optional[Actor] = None,
        genre_id: Optional[int] = None,
        success: bool = True,
        details: Optional[AuditDetails] = None,
        client: Optional[ClientInfo] = None,
        metadata: Optional[Mapping[str, Any]] = None,
    ) -> AuditLogEntry:
        return self.record(
            category=AuditCategory.GENRE_MANAGEMENT,
            action=action,
            level=self._outcome_level(success),
            success=success,
            actor=actor,
            client=client,
            resource_type="Genre",
            resource_id=genre_id,
            details=details,
            metadata=metadata,
        )

    def audit_data_access(
        self,
        action: str,
        *,
        actor: Optional[Actor] = None,
        resource_type: Optional[str] = None,
        filters: Optional[Mapping[str, Any]] = None,
        success: bool = True,
        client: Optional[ClientInfo] = None,
        metadata: Optional[Mapping[str, Any]] = None,
    ) -> AuditLogEntry:
        return self.record(
            category=AuditCategory.DATA_ACCESS,
            action=action,
            level=self._outcome_level(success),
            success=success,
            actor=actor,
            client=client,
            resource_type=resource_type,
            details={"filters": dict(filters or {})},
            metadata=metadata,
        )

    def audit_security(
        self,
        action: str,
        *,
        details: Optional[AuditDetails] = None,
        actor: Optional[Actor] = None,
        success: bool = True,
        client: Optional[ClientInfo] = None,
        metadata: Optional[Mapping[str, Any]] = None,
    ) -> AuditLogEntry:
        return self.record(
            category=AuditCategory.SECURITY,
            action=action,
            level=LogLevel.WARN,
            success=success,
            actor=actor,
            client=client,
            details=details,
            metadata=metadata,
        )

    def audit_system(
        self,
        action: str,
        *,
        actor: Optional[Actor] = None,
        success: bool = True,
        details: Optional[AuditDetails] = None,
        client: Optional[ClientInfo] = None,
        metadata: Optional[Mapping[str, Any]] = None,
    ) -> AuditLogEntry:
        return self.record(
            category=AuditCategory.SYSTEM,
            action=action,
            level=self._outcome_level(success),
            success=success,
            actor=actor,
            client=client,
            details=details,
            metadata=metadata,
        )

    # -------------------------
    # Operational events
    # -------------------------
    def log_performance(
        self,
        operation: str,
        duration_ms: int,
        *,
        actor: Optional[Actor] = None,
        details: Optional[AuditDetails] = None,
        metadata: Optional[Mapping[str, Any]] = None,
    ) -> AuditLogEntry:
        level = LogLevel.WARN if duration_ms > self.critical_operation_ms else LogLevel.INFO
        return self.record(
            category=AuditCategory.SYSTEM,
            action=f"PERFORMANCE_{operation.upper()}",
            level=level,
            success=True,
            actor=actor,
            duration=duration_ms,
            details=details,
            metadata={
                **(metadata or {}),
                "performanceThreshold": self.critical_operation_ms,
                "actualDuration": duration_ms,
            },
        )

    def log_system_error(
        self,
        error: BaseException,
        *,
        context: Optional[str] = None,
        actor: Optional[Actor] = None,
        client: Optional[ClientInfo] = None,
    ) -> AuditLogEntry:
        stack = "".join(traceback.format_exception(type(error), error, error.__traceback__))
        return self.record(
            category=AuditCategory.SYSTEM,
            action="SYSTEM_ERROR",
            level=LogLevel.ERROR,
            success=False,
            actor=actor,
            client=client,
            error_message=str(error),
            details=SystemErrorDetails(name=type(error).__name__, stack=stack, context=context),
        )

    def log_data_change(
        self,
        operation: str,
        resource_type: str,
        resource_id: Optional[int],
        old_data: Optional[Mapping[str, Any]],
        new_data: Optional[Mapping[str, Any]],
        *,
        actor: Optional[Actor] = None,
        client: Optional[ClientInfo] = None,
        metadata: Optional[Mapping[str, Any]] = None,
    ) -> AuditLogEntry:
        return self.record(
            category=AuditCategory.DATA_ACCESS,
            action=f"{operation.upper()}_{resource_type.upper()}",
            level=LogLevel.INFO,
            success=True,
            actor=actor,
            client=client,
            resource_type=resource_type,
            resource_id=resource_id,
            details=DataChangeDetails(
                operation=operation.upper(),
                old_data=old_data,
                new_data=new_data,
                changes=compute_changes(old_data, new_data),
            ),
            metadata=metadata,
        )


@lru_cache(maxsize=1)
def get_audit_recorder() -> AuditRecorder:
    config = settings.LIBRARY_AUDIT
    return AuditRecorder(
        get_log_sink(),
        critical_operation_ms=int(config.get("CRITICAL_OPERATION_MS", DEFAULT_CRITICAL_OPERATION_MS)),
    )
