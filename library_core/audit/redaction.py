# library_core/audit/redaction.py
from __future__ import annotations

from typing import Any, Mapping

REDACTED = "[REDACTED]"

SENSITIVE_KEY_MARKERS = ("password", "token", "secret", "key")


def is_sensitive_key(key: Any) -> bool:
    lowered = str(key).lower()
    return any(marker in lowered for marker in SENSITIVE_KEY_MARKERS)


def redact(value: Any) -> Any:
    """
    Return a copy of value with every sensitive key's value replaced by REDACTED,
    at any depth of nested mappings and lists.
    """
    if isinstance(value, Mapping):
        return {
            k: (REDACTED if is_sensitive_key(k) else redact(v))
            for k, v in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [redact(v) for v in value]
    return value
