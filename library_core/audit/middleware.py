# library_core/audit/middleware.py
from __future__ import annotations

import time
from typing import Optional

import structlog
from django.conf import settings
from django.utils.deprecation import MiddlewareMixin

from library_core.audit.entries import Actor, ClientInfo
from library_core.audit.instrumentation import RequestInstrumentation, RequestOutcome
from library_core.audit.recorder import get_audit_recorder
from library_core.common.api.exceptions import ensure_request_id

logger = structlog.get_logger(__name__)


def _error_message(response) -> Optional[str]:
    """
    Pull the message out of the canonical error envelope, else fall back to the reason phrase.
    """
    data = getattr(response, "data", None)
    if isinstance(data, dict):
        error = data.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if data.get("detail"):
            return str(data["detail"])
    return getattr(response, "reason_phrase", None)


class AuditInstrumentationMiddleware(MiddlewareMixin):
    """
    Times, classifies and audits every API request exactly once.

    - process_request: start timer, assign request_id, capture an already-authenticated actor.
    - process_response: hand the outcome to RequestInstrumentation.

    DRF authenticates inside the view and writes the user back onto the HttpRequest,
    so JWT users are visible here by the time the response comes back.
    The response (or error) returned to the client is never changed.
    """

    def _config(self) -> dict:
        return getattr(settings, "LIBRARY_AUDIT", {}) or {}

    def _is_skipped(self, path: str) -> bool:
        cfg = self._config()
        api_prefixes = tuple(cfg.get("API_PREFIXES", ("/api/v1/", "/api/")))
        skip_prefixes = tuple(cfg.get("SKIP_PATH_PREFIXES", ()))
        if skip_prefixes and path.startswith(skip_prefixes):
            return True
        return not path.startswith(api_prefixes)

    def process_request(self, request):
        if self._is_skipped(request.path):
            return None

        request._audit_started = time.monotonic()
        ensure_request_id(request)

        user = getattr(request, "user", None)
        request._audit_actor = Actor.from_user(user) if user is not None else None
        return None

    def process_response(self, request, response):
        started = getattr(request, "_audit_started", None)
        if started is None or getattr(request, "_audit_recorded", False):
            return response
        request._audit_recorded = True

        rid = getattr(request, "request_id", None)
        if rid:
            response["X-Request-ID"] = rid

        outcome = RequestOutcome(
            method=request.method,
            path=request.path,
            status_code=response.status_code,
            duration_ms=int((time.monotonic() - started) * 1000),
            actor=Actor.from_user(getattr(request, "user", None)) or request._audit_actor,
            client=ClientInfo.from_request(request),
            query=request.GET.dict(),
            error_message=_error_message(response) if response.status_code >= 400 else None,
            request_id=rid,
        )

        cfg = self._config()
        instrumentation = RequestInstrumentation(
            get_audit_recorder(),
            api_prefixes=cfg.get("API_PREFIXES", ("/api/v1/", "/api/")),
            slow_operation_ms=int(cfg.get("SLOW_OPERATION_MS", 3000)),
        )
        try:
            instrumentation.record(outcome)
        except Exception:
            # Observation must not change what the client receives.
            logger.exception("audit_instrumentation_failed", path=request.path, request_id=rid)
        return response
