# library_core/common/api/exceptions.py

from __future__ import annotations

import uuid
from typing import Any

import structlog
from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import (
    APIException,
    AuthenticationFailed,
    NotAuthenticated,
    NotFound,
    PermissionDenied,
    ValidationError,
)
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = structlog.get_logger(__name__)


def ensure_request_id(request) -> str:
    """
    Ensures request has a stable request_id attribute and returns it.
    Safe to call from middleware and DRF exception handler; the same id is
    stamped on audit entries so API errors can be matched to the audit trail.
    """
    rid = getattr(request, "request_id", None) if request is not None else None
    if not rid:
        rid = uuid.uuid4().hex
        if request is not None:
            setattr(request, "request_id", rid)
            # DRF Request proxies attribute reads but not writes to the HttpRequest
            inner = getattr(request, "_request", None)
            if inner is not None:
                setattr(inner, "request_id", rid)
    return rid


def build_error_envelope(*, request=None, code: str, message: str, details: Any = None) -> dict[str, Any]:
    """
    Canonical error envelope for the library API.
    Reusable from Django middleware (JsonResponse) and DRF (Response).
    """
    rid = ensure_request_id(request)
    return {
        "error": {
            "code": code,
            "message": message,
            "details": details,
            "request_id": rid,
        }
    }


class ConflictError(APIException):
    """
    409 Conflict that still flows through the global exception handler.
    Raised for illegal status transitions and duplicate natural keys.
    """
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Conflict."
    default_code = "conflict"

    def __init__(self, detail=None, code=None):
        super().__init__(detail=detail or self.default_detail, code=code or self.default_code)


class AuditLogReadError(APIException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Audit logs could not be read."
    default_code = "audit_log_unavailable"


# First match wins; ordered from most to least specific.
ERROR_CODES = (
    (ValidationError, "validation_error"),
    (NotAuthenticated, "not_authenticated"),
    (AuthenticationFailed, "authentication_failed"),
    (PermissionDenied, "permission_denied"),
    ((Http404, NotFound), "not_found"),
)


def _code_for(exc: Exception, http_status: int) -> str:
    for kind, code in ERROR_CODES:
        if isinstance(exc, kind):
            return code
    if isinstance(exc, APIException):
        return exc.default_code or "api_error"
    return "server_error" if http_status >= 500 else "error"


def _split_detail(data: Any) -> tuple[str, Any]:
    """
    DRF error payload -> (message, details).

    {"detail": m}           -> (m, None)
    {"detail": m, **rest}   -> (m, rest)
    anything else           -> ("Request failed.", data)
    """
    if isinstance(data, dict) and "detail" in data:
        rest = {k: v for k, v in data.items() if k != "detail"}
        return str(data["detail"]), rest or None
    return "Request failed.", data


def api_exception_handler(exc: Exception, context: dict[str, Any]):
    request = context.get("request")
    response = drf_exception_handler(exc, context)

    # Truly unhandled error
    if response is None:
        logger.exception(
            "unhandled_api_exception",
            view=type(context.get("view")).__name__,
            request_id=ensure_request_id(request),
        )
        return Response(
            build_error_envelope(
                request=request,
                code="server_error",
                message="Unexpected server error.",
                details=None,
            ),
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    message, details = _split_detail(response.data)
    return Response(
        build_error_envelope(
            request=request,
            code=_code_for(exc, response.status_code),
            message=message,
            details=details,
        ),
        status=response.status_code,
        headers=response.headers,
    )
