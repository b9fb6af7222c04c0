# library_core/audit/entries.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone as dt_timezone
from enum import Enum
from typing import Any, Mapping, Optional, Union

from django.utils import timezone
from django.utils.dateparse import parse_datetime


class AuditCategory(str, Enum):
    AUTH = "AUTH"
    USER_MANAGEMENT = "USER_MANAGEMENT"
    BOOK_MANAGEMENT = "BOOK_MANAGEMENT"
    GENRE_MANAGEMENT = "GENRE_MANAGEMENT"
    DATA_ACCESS = "DATA_ACCESS"
    SYSTEM = "SYSTEM"
    SECURITY = "SECURITY"


class LogLevel(str, Enum):
    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"

    @property
    def severity(self) -> int:
        return _SEVERITY[self]


_SEVERITY = {LogLevel.DEBUG: 10, LogLevel.INFO: 20, LogLevel.WARN: 30, LogLevel.ERROR: 40}


def format_timestamp(value: datetime) -> str:
    """
    UTC ISO-8601 with millisecond precision and a trailing Z.
    """
    return value.astimezone(dt_timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: Any) -> datetime:
    if not isinstance(value, str):
        raise ValueError(f"timestamp must be a string, got {type(value).__name__}")
    parsed = parse_datetime(value)
    if parsed is None:
        raise ValueError(f"invalid timestamp {value!r}")
    if timezone.is_naive(parsed):
        parsed = timezone.make_aware(parsed, dt_timezone.utc)
    return parsed


# -------------------------------------------------------------------
# Who / where
# -------------------------------------------------------------------

@dataclass(frozen=True)
class Actor:
    user_id: Optional[int] = None
    email: Optional[str] = None
    role: Optional[str] = None

    @classmethod
    def from_user(cls, user) -> Optional["Actor"]:
        if user is None or not getattr(user, "is_authenticated", False):
            return None
        return cls(
            user_id=getattr(user, "pk", None),
            email=getattr(user, "email", None),
            role=getattr(user, "role", None),
        )


SYSTEM_ACTOR = Actor(email="system")


@dataclass(frozen=True)
class ClientInfo:
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None

    @classmethod
    def from_request(cls, request) -> Optional["ClientInfo"]:
        if request is None:
            return None
        meta = getattr(request, "META", {}) or {}
        forwarded = meta.get("HTTP_X_FORWARDED_FOR", "")
        ip = forwarded.split(",")[0].strip() if forwarded else meta.get("REMOTE_ADDR")
        return cls(ip_address=ip or None, user_agent=meta.get("HTTP_USER_AGENT") or None)


# -------------------------------------------------------------------
# Details: one shape per event kind, free-form mapping as the fallback
# -------------------------------------------------------------------

def _compact(data: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in data.items() if v is not None}


@dataclass(frozen=True)
class RequestDetails:
    method: str
    url: str
    status_code: Optional[int] = None
    duration: Optional[int] = None
    success: Optional[bool] = None
    error: Optional[str] = None
    resource_type: Optional[str] = None

    def as_dict(self) -> dict[str, Any]:
        return _compact(
            {
                "method": self.method,
                "url": self.url,
                "resourceType": self.resource_type,
                "statusCode": self.status_code,
                "duration": self.duration,
                "success": self.success,
                "error": self.error,
            }
        )


@dataclass(frozen=True)
class SecurityErrorDetails:
    error: str
    endpoint: str
    method: str
    status_code: int

    def as_dict(self) -> dict[str, Any]:
        return {
            "error": self.error,
            "endpoint": self.endpoint,
            "method": self.method,
            "statusCode": self.status_code,
        }


@dataclass(frozen=True)
class DataChangeDetails:
    operation: str
    old_data: Optional[Mapping[str, Any]]
    new_data: Optional[Mapping[str, Any]]
    changes: Optional[dict[str, dict[str, Any]]]

    def as_dict(self) -> dict[str, Any]:
        return {
            "operation": self.operation,
            "oldData": dict(self.old_data) if self.old_data is not None else None,
            "newData": dict(self.new_data) if self.new_data is not None else None,
            "changes": self.changes,
        }


@dataclass(frozen=True)
class SystemErrorDetails:
    name: str
    stack: Optional[str] = None
    context: Optional[str] = None

    def as_dict(self) -> dict[str, Any]:
        return {"stack": self.stack, "context": self.context, "name": self.name}


AuditDetails = Union[
    RequestDetails,
    SecurityErrorDetails,
    DataChangeDetails,
    SystemErrorDetails,
    Mapping[str, Any],
]


def normalize_details(details: Optional[AuditDetails]) -> Optional[dict[str, Any]]:
    if details is None:
        return None
    if hasattr(details, "as_dict"):
        return details.as_dict()
    if isinstance(details, Mapping):
        return dict(details)
    raise TypeError(f"Unsupported audit details type: {type(details).__name__}")


# -------------------------------------------------------------------
# Write model
# -------------------------------------------------------------------

@dataclass(frozen=True)
class AuditLogEntry:
    """
    One audit event, immutable once built. to_record() is the line written to the sink.
    """
    timestamp: datetime
    level: LogLevel
    category: AuditCategory
    action: str
    success: bool = True
    user_id: Optional[int] = None
    user_email: Optional[str] = None
    user_role: Optional[str] = None
    resource_id: Optional[int] = None
    resource_type: Optional[str] = None
    details: Optional[dict[str, Any]] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    error_message: Optional[str] = None
    duration: Optional[int] = None
    metadata: Optional[dict[str, Any]] = None

    def to_record(self) -> dict[str, Any]:
        record = {
            "timestamp": format_timestamp(self.timestamp),
            "level": self.level.value,
            "category": self.category.value,
            "action": self.action,
            "userId": self.user_id,
            "userEmail": self.user_email,
            "userRole": self.user_role,
            "resourceId": self.resource_id,
            "resourceType": self.resource_type,
            "details": self.details,
            "ipAddress": self.ip_address,
            "userAgent": self.user_agent,
            "success": self.success,
            "errorMessage": self.error_message,
            "duration": self.duration,
            "metadata": self.metadata,
        }
        return _compact(record)


# -------------------------------------------------------------------
# Read model
# -------------------------------------------------------------------

@dataclass(frozen=True)
class AuditReportEntry:
    """
    Projection of a persisted record, rebuilt while generating a report.
    """
    timestamp: datetime
    category: str
    action: str
    success: bool
    user_id: Optional[int] = None
    user_email: Optional[str] = None
    resource_type: Optional[str] = None
    resource_id: Optional[int] = None
    ip_address: Optional[str] = None
    details: Any = None
    raw_timestamp: str = field(default="", compare=False)

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "AuditReportEntry":
        """
        Raises ValueError for records that cannot be placed on the timeline.
        """
        raw_ts = record.get("timestamp")
        ts = parse_timestamp(raw_ts)

        for key in ("category", "action"):
            if record.get(key) is not None and not isinstance(record[key], str):
                raise ValueError(f"{key} must be a string")

        user_id = record.get("userId")
        if user_id is not None and not isinstance(user_id, int):
            try:
                user_id = int(user_id)
            except (TypeError, ValueError):
                user_id = None

        return cls(
            timestamp=ts,
            raw_timestamp=raw_ts,
            category=record.get("category") or "UNKNOWN",
            action=record.get("action") or "UNKNOWN_ACTION",
            success=record.get("success") is not False,
            user_id=user_id,
            user_email=record.get("userEmail"),
            resource_type=record.get("resourceType"),
            resource_id=record.get("resourceId"),
            ip_address=record.get("ipAddress"),
            details=record.get("details"),
        )

    def as_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.raw_timestamp or format_timestamp(self.timestamp),
            "category": self.category,
            "action": self.action,
            "userId": self.user_id,
            "userEmail": self.user_email,
            "success": self.success,
            "resourceType": self.resource_type,
            "resourceId": self.resource_id,
            "ipAddress": self.ip_address,
            "details": self.details,
        }
