# library_core/audit/instrumentation.py
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence

from library_core.audit.entries import (
    Actor,
    ClientInfo,
    RequestDetails,
    SecurityErrorDetails,
)
from library_core.audit.recorder import AuditRecorder

# URL fragment -> operation tag. First match wins; checked before the HTTP verb.
NAMED_OPERATIONS: tuple[tuple[str, str], ...] = (
    ("/login", "LOGIN"),
    ("/register", "REGISTER"),
    ("/search", "SEARCH"),
    ("/export", "EXPORT"),
    ("/restore", "RESTORE"),
    ("/imagen", "UPLOAD_IMAGE"),
    ("/reports", "GENERATE_REPORT"),
    ("/statistics", "VIEW_STATISTICS"),
    ("/suspicious-activity", "VIEW_SUSPICIOUS"),
    ("/user-activity", "VIEW_USER_ACTIVITY"),
    ("/security", "VIEW_SECURITY"),
)

VERB_OPERATIONS = {
    "GET": "READ",
    "POST": "CREATE",
    "PUT": "UPDATE",
    "PATCH": "UPDATE",
    "DELETE": "DELETE",
}

AUDIT_REPORT_ACTIONS = {
    "GENERATE_REPORT": "GENERATE_AUDIT_REPORT",
    "VIEW_STATISTICS": "VIEW_AUDIT_STATISTICS",
    "VIEW_SUSPICIOUS": "VIEW_SUSPICIOUS_ACTIVITY",
    "VIEW_USER_ACTIVITY": "VIEW_USER_ACTIVITY",
    "VIEW_SECURITY": "VIEW_SECURITY_LOGS",
}

SECURITY_STATUS_CODES = {401, 403, 404, 429}
SECURITY_URL_PATTERNS = ("/auth/", "/login", "/register")
SECURITY_MESSAGE_MARKERS = ("unauthorized", "forbidden", "token")

_NUMERIC = re.compile(r"^\d+$")


def classify_operation(method: str, path: str) -> str:
    for fragment, tag in NAMED_OPERATIONS:
        if fragment in path:
            return tag
    return VERB_OPERATIONS.get(method.upper(), "OPERATION")


def _segments(path: str, api_prefixes: Sequence[str]) -> list[str]:
    clean = path.split("?", 1)[0]
    for prefix in sorted(api_prefixes, key=len, reverse=True):
        if clean.startswith(prefix):
            clean = clean[len(prefix):]
            break
    return [s for s in clean.split("/") if s]


def extract_resource_type(path: str, api_prefixes: Sequence[str] = ()) -> str:
    for segment in _segments(path, api_prefixes):
        if not _NUMERIC.match(segment):
            return segment
    return "unknown"


def extract_resource_id(path: str, api_prefixes: Sequence[str] = ()) -> Optional[int]:
    for segment in _segments(path, api_prefixes):
        if _NUMERIC.match(segment) and int(segment) > 0:
            return int(segment)
    return None


def is_security_relevant(status_code: Optional[int], path: str, message: Optional[str]) -> bool:
    if status_code in SECURITY_STATUS_CODES:
        return True
    if any(pattern in path for pattern in SECURITY_URL_PATTERNS):
        return True
    lowered = (message or "").lower()
    return any(marker in lowered for marker in SECURITY_MESSAGE_MARKERS)


@dataclass(frozen=True)
class RequestOutcome:
    """
    What the instrumentation observed about one finished request.
    """
    method: str
    path: str
    status_code: int
    duration_ms: int
    actor: Optional[Actor] = None
    client: Optional[ClientInfo] = None
    query: Optional[Mapping[str, Any]] = None
    error_message: Optional[str] = None
    request_id: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.status_code < 400


class RequestInstrumentation:
    """
    Classifies a finished request and records it through the AuditRecorder:

    - one entry routed by resource type (auth, users, libros, generos/estados, audit, else SYSTEM)
    - a performance entry when the request was slow
    - an extra SECURITY_ERROR entry for security-relevant failures
    """

    def __init__(
        self,
        recorder: AuditRecorder,
        *,
        api_prefixes: Sequence[str] = ("/api/v1/", "/api/"),
        slow_operation_ms: int = 3000,
    ):
        self.recorder = recorder
        self.api_prefixes = tuple(api_prefixes)
        self.slow_operation_ms = slow_operation_ms

    def record(self, outcome: RequestOutcome) -> None:
        operation = classify_operation(outcome.method, outcome.path)
        resource_type = extract_resource_type(outcome.path, self.api_prefixes)
        resource_id = extract_resource_id(outcome.path, self.api_prefixes)

        self._record_operation(outcome, operation, resource_type, resource_id)

        if outcome.success and outcome.duration_ms > self.slow_operation_ms:
            self.recorder.log_performance(
                f"{resource_type}_{operation}",
                outcome.duration_ms,
                actor=outcome.actor,
                details={"method": outcome.method, "url": outcome.path, "statusCode": outcome.status_code},
                metadata=self._metadata(outcome),
            )

        if not outcome.success and is_security_relevant(outcome.status_code, outcome.path, outcome.error_message):
            self.recorder.audit_security(
                "SECURITY_ERROR",
                details=SecurityErrorDetails(
                    error=outcome.error_message or "",
                    endpoint=outcome.path,
                    method=outcome.method,
                    status_code=outcome.status_code,
                ),
                actor=outcome.actor,
                success=False,
                client=outcome.client,
                metadata=self._metadata(outcome),
            )

    @staticmethod
    def _metadata(outcome: RequestOutcome) -> Optional[dict[str, Any]]:
        return {"requestId": outcome.request_id} if outcome.request_id else None

    def _request_details(self, outcome: RequestOutcome, resource_type: Optional[str] = None) -> RequestDetails:
        return RequestDetails(
            method=outcome.method,
            url=outcome.path,
            resource_type=resource_type,
            status_code=outcome.status_code,
            duration=outcome.duration_ms,
            success=outcome.success,
            error=outcome.error_message if not outcome.success else None,
        )

    def _record_operation(
        self,
        outcome: RequestOutcome,
        operation: str,
        resource_type: str,
        resource_id: Optional[int],
    ) -> None:
        rec = self.recorder
        common = {"actor": outcome.actor, "client": outcome.client, "metadata": self._metadata(outcome)}
        success = outcome.success
        kind = resource_type.upper()

        if resource_type == "auth" or operation in ("LOGIN", "REGISTER"):
            if operation == "LOGIN":
                action = "LOGIN_SUCCESS" if success else "LOGIN_FAILURE"
            elif operation == "REGISTER":
                action = "REGISTER_ATTEMPT"
            else:
                action = "AUTH_OPERATION"
            rec.audit_auth(action, success=success, details=self._request_details(outcome), **common)

        elif resource_type == "users":
            if operation in ("READ", "SEARCH"):
                rec.audit_data_access(
                    f"{operation}_{kind}",
                    resource_type=resource_type,
                    filters=outcome.query,
                    success=success,
                    **common,
                )
            else:
                rec.audit_user_management(
                    f"{operation}_USER",
                    target_user_id=resource_id,
                    success=success,
                    details=self._request_details(outcome),
                    **common,
                )

        elif resource_type == "libros":
            if operation in ("READ", "SEARCH", "EXPORT"):
                rec.audit_data_access(
                    f"{operation}_{kind}",
                    resource_type=resource_type,
                    filters=outcome.query,
                    success=success,
                    **common,
                )
            else:
                rec.audit_book_management(
                    f"{operation}_BOOK",
                    book_id=resource_id,
                    success=success,
                    details=self._request_details(outcome),
                    **common,
                )

        elif resource_type in ("generos", "estados"):
            if operation in ("READ", "SEARCH"):
                rec.audit_data_access(
                    f"{operation}_{kind}",
                    resource_type=resource_type,
                    filters=outcome.query,
                    success=success,
                    **common,
                )
            else:
                # generos -> GENERO, estados -> ESTADO
                rec.audit_genre_management(
                    f"{operation}_{kind[:-1]}",
                    genre_id=resource_id,
                    success=success,
                    details=self._request_details(outcome),
                    **common,
                )

        elif resource_type == "audit":
            action = AUDIT_REPORT_ACTIONS.get(operation, f"ACCESS_AUDIT_{operation}")
            rec.audit_security(action, success=success, details=self._request_details(outcome), **common)

        else:
            rec.audit_system(
                f"{operation}_{kind}",
                success=success,
                details=self._request_details(outcome, resource_type=resource_type),
                **common,
            )
