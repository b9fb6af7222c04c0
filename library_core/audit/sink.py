# library_core/audit/sink.py
from __future__ import annotations

import json
import threading
from dataclasses import dataclass, replace
from datetime import date, timedelta
from functools import lru_cache
from pathlib import Path
from typing import Any, Callable, Iterable, Iterator, Mapping, Optional

import structlog
from django.conf import settings
from django.utils import timezone

from library_core.audit.entries import AuditCategory, LogLevel

logger = structlog.get_logger("library_core.audit")


@dataclass(frozen=True)
class StreamPolicy:
    """
    Which records a stream keeps and for how long.
    """
    name: str
    min_level: LogLevel
    retention_days: int
    categories: Optional[frozenset[str]] = None

    def accepts(self, record: Mapping[str, Any]) -> bool:
        try:
            level = LogLevel(record.get("level", LogLevel.INFO.value))
        except ValueError:
            level = LogLevel.INFO
        if level.severity < self.min_level.severity:
            return False
        if self.categories is not None and record.get("category") not in self.categories:
            return False
        return True


DEFAULT_STREAMS: tuple[StreamPolicy, ...] = (
    StreamPolicy("application", LogLevel.INFO, 30),
    StreamPolicy("audit", LogLevel.INFO, 90),
    StreamPolicy("error", LogLevel.ERROR, 30),
    StreamPolicy("security", LogLevel.WARN, 365, categories=frozenset({AuditCategory.SECURITY.value})),
)


class DailyFileLogger:
    """
    structlog logger that appends each rendered line to <directory>/<prefix>-YYYY-MM-DD.log.
    """

    def __init__(self, directory: Path, prefix: str, *, today: Callable[[], date]):
        self.directory = directory
        self.prefix = prefix
        self._today = today
        self._lock = threading.Lock()

    def path_for(self, day: date) -> Path:
        return self.directory / f"{self.prefix}-{day.isoformat()}.log"

    def msg(self, message: str) -> None:
        path = self.path_for(self._today())
        with self._lock:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "a", encoding="utf-8") as fh:
                fh.write(message + "\n")

    log = debug = info = warn = warning = error = critical = exception = msg


class LogSink:
    """
    Durable, append-only audit storage: one JSON object per line, one file per stream per day.

    append() fans a record out to every stream whose policy accepts it. I/O errors
    propagate to the caller. read() lazily re-reads a stream oldest file first and
    silently skips lines that are not JSON objects.
    """

    def __init__(
        self,
        directory: Path | str,
        *,
        streams: Iterable[StreamPolicy] = DEFAULT_STREAMS,
        service: Optional[str] = None,
        environment: Optional[str] = None,
        today: Optional[Callable[[], date]] = None,
        echo: bool = True,
    ):
        self.directory = Path(directory)
        self.streams = {policy.name: policy for policy in streams}
        self._today = today or timezone.localdate
        self._echo = echo

        initial_values = {k: v for k, v in (("service", service), ("environment", environment)) if v}
        self._writers = {
            name: structlog.wrap_logger(
                DailyFileLogger(self.directory, name, today=self._today),
                processors=[
                    structlog.processors.EventRenamer("message"),
                    structlog.processors.JSONRenderer(ensure_ascii=False, default=str),
                ],
                wrapper_class=structlog.BoundLogger,
                context_class=dict,
                cache_logger_on_first_use=False,
                **initial_values,
            )
            for name in self.streams
        }

    def append(self, record: Mapping[str, Any]) -> list[str]:
        """
        Persist one record. Returns the names of the streams it was written to.
        """
        fields = dict(record)
        message = str(fields.get("action", ""))

        written: list[str] = []
        for name, policy in self.streams.items():
            if policy.accepts(fields):
                self._writers[name].msg(message, **fields)
                written.append(name)

        if self._echo:
            self._echo_to_console(fields, message)
        return written

    def _echo_to_console(self, fields: Mapping[str, Any], message: str) -> None:
        level = fields.get("level", LogLevel.INFO.value)
        method = getattr(logger, "warning" if level == LogLevel.WARN.value else level, logger.info)
        method(
            message,
            category=fields.get("category"),
            success=fields.get("success"),
            user_id=fields.get("userId"),
            resource=fields.get("resourceType"),
        )

    # -------------------------
    # Reading
    # -------------------------
    def files(self, stream: str) -> list[Path]:
        """
        Stream files sorted chronologically (ISO dates sort lexically).
        """
        if not self.directory.is_dir():
            return []
        return sorted(self.directory.glob(f"{stream}-*.log"))

    def read(self, stream: str = "audit") -> Iterator[dict[str, Any]]:
        for path in self.files(stream):
            with open(path, encoding="utf-8", errors="replace") as fh:
                for line in fh:
                    line = line.strip()
                    if not line:
                        continue
                    try:
                        record = json.loads(line)
                    except json.JSONDecodeError:
                        continue
                    if isinstance(record, dict):
                        yield record

    # -------------------------
    # Retention
    # -------------------------
    def _file_day(self, stream: str, path: Path) -> Optional[date]:
        try:
            return date.fromisoformat(path.stem[len(stream) + 1:])
        except ValueError:
            return None

    def expired_files(self, *, today: Optional[date] = None) -> list[Path]:
        today = today or self._today()
        expired: list[Path] = []
        for name, policy in self.streams.items():
            cutoff = today - timedelta(days=policy.retention_days)
            for path in self.files(name):
                day = self._file_day(name, path)
                if day is not None and day < cutoff:
                    expired.append(path)
        return expired

    def purge_expired(self, *, today: Optional[date] = None) -> list[Path]:
        removed = self.expired_files(today=today)
        for path in removed:
            path.unlink()
        if removed:
            logger.info("audit_logs_purged", files=len(removed))
        return removed


def streams_from_settings(config: Mapping[str, Any]) -> tuple[StreamPolicy, ...]:
    retention = config.get("RETENTION_DAYS", {}) or {}
    return tuple(
        replace(policy, retention_days=int(retention.get(policy.name, policy.retention_days)))
        for policy in DEFAULT_STREAMS
    )


@lru_cache(maxsize=1)
def get_log_sink() -> LogSink:
    """
    The process-wide sink, built once from settings.LIBRARY_AUDIT.
    """
    config = settings.LIBRARY_AUDIT
    return LogSink(
        config["LOG_DIR"],
        streams=streams_from_settings(config),
        service=config.get("SERVICE_NAME"),
        environment=config.get("ENVIRONMENT"),
    )
