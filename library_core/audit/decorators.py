# library_core/audit/decorators.py
from __future__ import annotations

import functools
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional

import structlog
from rest_framework.exceptions import APIException

from library_core.audit.entries import Actor, AuditCategory, ClientInfo
from library_core.audit.recorder import AuditRecorder, get_audit_recorder

# Request body keys never copied into audit details
REQUEST_SECRET_FIELDS = ("password", "confirmPassword", "currentPassword", "newPassword")

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class AuditConfig:
    """
    Static audit settings for one handler, bound at class-definition time by with_audit().
    """
    category: AuditCategory
    action: str
    resource_type: Optional[str] = None
    log_success: bool = True
    log_failure: bool = True
    sensitive_data: bool = False

    @classmethod
    def auth(cls, action: str) -> "AuditConfig":
        return cls(category=AuditCategory.AUTH, action=action)

    @classmethod
    def user_management(cls, action: str, *, sensitive_data: bool = False) -> "AuditConfig":
        return cls(
            category=AuditCategory.USER_MANAGEMENT,
            action=action,
            resource_type="User",
            sensitive_data=sensitive_data,
        )

    @classmethod
    def book_management(cls, action: str) -> "AuditConfig":
        return cls(category=AuditCategory.BOOK_MANAGEMENT, action=action, resource_type="Book")

    @classmethod
    def genre_management(cls, action: str) -> "AuditConfig":
        return cls(category=AuditCategory.GENRE_MANAGEMENT, action=action, resource_type="Genre")

    @classmethod
    def security(cls, action: str) -> "AuditConfig":
        return cls(category=AuditCategory.SECURITY, action=action, sensitive_data=True)


def _request_data(request, *, include_sensitive: bool = False) -> dict[str, Any]:
    data = getattr(request, "data", None)
    if not isinstance(data, Mapping):
        return {}
    # Uploaded files are not serialisable; keep their names only
    cleaned = {
        k: (getattr(v, "name", v) if hasattr(v, "read") else v)
        for k, v in data.items()
    }
    if not include_sensitive:
        for key in REQUEST_SECRET_FIELDS:
            cleaned.pop(key, None)
    return cleaned


def _result_data(response) -> Mapping[str, Any]:
    data = getattr(response, "data", None)
    return data if isinstance(data, Mapping) else {}


def _success_metadata(config: AuditConfig, request, result: Mapping[str, Any]) -> dict[str, Any]:
    if not result:
        return {}

    method = request.method.upper()
    changes = _request_data(request, include_sensitive=config.sensitive_data) if method in ("PUT", "PATCH") else None

    if config.category == AuditCategory.BOOK_MANAGEMENT:
        meta = {
            "bookTitle": result.get("title"),
            "bookAuthor": result.get("author"),
            "bookGenre": result.get("genre_id"),
        }
        if changes is not None:
            meta["changes"] = changes
        if method == "DELETE":
            meta["deletionType"] = "soft_delete"
        return meta

    if config.category == AuditCategory.USER_MANAGEMENT:
        meta = {"userEmail": result.get("email"), "userRole": result.get("role")}
        if changes is not None:
            meta["changes"] = changes
        return meta

    if config.category == AuditCategory.GENRE_MANAGEMENT:
        meta = {"genreName": result.get("name"), "genreDescription": result.get("description")}
        if changes is not None:
            meta["changes"] = changes
        return meta

    return {}


def _resource_id(kwargs: Mapping[str, Any], result: Mapping[str, Any]) -> Optional[int]:
    raw = kwargs.get("pk") or kwargs.get("id") or result.get("id")
    try:
        return int(raw) if raw is not None else None
    except (TypeError, ValueError):
        return None


def _emit(
    recorder: AuditRecorder,
    config: AuditConfig,
    action: str,
    *,
    actor: Optional[Actor],
    client: ClientInfo,
    resource_id: Optional[int],
    success: bool,
    details: dict[str, Any],
) -> None:
    common = {"actor": actor, "client": client, "success": success, "details": details}

    if config.category == AuditCategory.BOOK_MANAGEMENT:
        recorder.audit_book_management(action, book_id=resource_id, **common)
    elif config.category == AuditCategory.USER_MANAGEMENT:
        recorder.audit_user_management(action, target_user_id=resource_id, **common)
    elif config.category == AuditCategory.GENRE_MANAGEMENT:
        recorder.audit_genre_management(action, genre_id=resource_id, **common)
    elif config.category == AuditCategory.AUTH:
        recorder.audit_auth(action, **common)
    elif config.category == AuditCategory.SECURITY:
        recorder.audit_security(action, **common)
    else:
        recorder.audit_system(action, **common)


def with_audit(config: AuditConfig, *, recorder: Optional[AuditRecorder] = None) -> Callable:
    """
    Wrap a ViewSet/APIView handler so it records <action>_SUCCESS or <action>_FAILURE.

        class BookViewSet(viewsets.ViewSet):
            @with_audit(AuditConfig.book_management("CREATE_BOOK"))
            def create(self, request): ...

    Exceptions are recorded and re-raised unchanged. Error responses returned
    without raising are recorded as failures too.
    """

    def decorator(handler: Callable) -> Callable:
        @functools.wraps(handler)
        def wrapper(view, request, *args, **kwargs):
            rec = recorder or get_audit_recorder()
            actor = Actor.from_user(getattr(request, "user", None))
            client = ClientInfo.from_request(request)

            try:
                response = handler(view, request, *args, **kwargs)
            except Exception as exc:
                if config.log_failure:
                    message = str(exc.detail) if isinstance(exc, APIException) else str(exc)
                    try:
                        _emit(
                            rec,
                            config,
                            f"{config.action}_FAILURE",
                            actor=actor,
                            client=client,
                            resource_id=_resource_id(kwargs, {}),
                            success=False,
                            details={
                                "error": message,
                                "requestData": _request_data(request, include_sensitive=config.sensitive_data),
                            },
                        )
                    except Exception:
                        # The handler's error is what the caller sees.
                        logger.exception("audit_failure_record_failed", action=config.action)
                raise

            status_code = getattr(response, "status_code", 200)
            result = _result_data(response)
            if status_code >= 400:
                if config.log_failure:
                    _emit(
                        rec,
                        config,
                        f"{config.action}_FAILURE",
                        actor=actor,
                        client=client,
                        resource_id=_resource_id(kwargs, {}),
                        success=False,
                        details={
                            "error": str(result.get("detail", "")),
                            "requestData": _request_data(request, include_sensitive=config.sensitive_data),
                        },
                    )
            elif config.log_success:
                _emit(
                    rec,
                    config,
                    f"{config.action}_SUCCESS",
                    actor=actor,
                    client=client,
                    resource_id=_resource_id(kwargs, result),
                    success=True,
                    details=_success_metadata(config, request, result),
                )
            return response

        wrapper.audit_config = config
        return wrapper

    return decorator
