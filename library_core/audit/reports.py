# library_core/audit/reports.py
from __future__ import annotations

from collections import Counter, defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Callable, Iterable, Iterator, Optional

import structlog
from django.utils import timezone

from library_core.audit.entries import (
    SYSTEM_ACTOR,
    AuditCategory,
    AuditReportEntry,
    format_timestamp,
)
from library_core.audit.recorder import AuditRecorder
from library_core.audit.sink import LogSink

logger = structlog.get_logger(__name__)

LOGIN_FAILURE_MARKERS = ("LOGIN_FAILURE", "FAILED_LOGIN")
LOGIN_FAILURE_THRESHOLD = 5
OFF_HOURS = range(2, 7)  # 02:00 - 06:59 local time
OFF_HOURS_THRESHOLD = 10
FAILURE_RATE_MIN_OPERATIONS = 10
FAILURE_RATE_THRESHOLD = 0.5
MOST_ACTIVE_USERS_LIMIT = 10


@dataclass(frozen=True)
class AuditReportFilter:
    """
    Predicates applied to every persisted record. Time bounds are inclusive;
    action is a substring match, the rest are exact.
    """
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    user_id: Optional[int] = None
    category: Optional[str] = None
    action: Optional[str] = None
    success: Optional[bool] = None
    ip_address: Optional[str] = None

    def matches(self, entry: AuditReportEntry) -> bool:
        if self.start_date is not None and entry.timestamp < self.start_date:
            return False
        if self.end_date is not None and entry.timestamp > self.end_date:
            return False
        if self.user_id is not None and entry.user_id != self.user_id:
            return False
        if self.category and entry.category != self.category:
            return False
        if self.action and self.action not in entry.action:
            return False
        if self.success is not None and entry.success != self.success:
            return False
        if self.ip_address and entry.ip_address != self.ip_address:
            return False
        return True

    def as_dict(self) -> dict[str, Any]:
        data = {
            "startDate": format_timestamp(self.start_date) if self.start_date else None,
            "endDate": format_timestamp(self.end_date) if self.end_date else None,
            "userId": self.user_id,
            "category": self.category,
            "action": self.action,
            "success": self.success,
            "ipAddress": self.ip_address,
        }
        return {k: v for k, v in data.items() if v is not None}


@dataclass(frozen=True)
class SuspiciousPattern:
    type: str
    severity: str
    description: str
    extra: dict[str, Any] = field(default_factory=dict)

    def as_dict(self) -> dict[str, Any]:
        return {"type": self.type, "severity": self.severity, "description": self.description, **self.extra}


class AuditReportEngine:
    """
    Analytical queries over the persisted audit stream.

    The sink is re-read on every call. Lines that are not JSON objects or
    carry an unusable timestamp are skipped; any other failure is recorded
    as a SYSTEM_ERROR and re-raised.
    """

    def __init__(
        self,
        sink: LogSink,
        recorder: AuditRecorder,
        *,
        clock: Callable[[], datetime] = timezone.now,
        stream: str = "audit",
    ):
        self.sink = sink
        self.recorder = recorder
        self.clock = clock
        self.stream = stream

    # -------------------------
    # Reading
    # -------------------------
    def iter_entries(self, filters: Optional[AuditReportFilter] = None) -> Iterator[AuditReportEntry]:
        for record in self.sink.read(self.stream):
            try:
                entry = AuditReportEntry.from_record(record)
            except ValueError:
                continue
            if filters is None or filters.matches(entry):
                yield entry

    def _collect(self, filters: AuditReportFilter) -> list[AuditReportEntry]:
        return sorted(self.iter_entries(filters), key=lambda e: e.timestamp, reverse=True)

    def _window(self, delta: timedelta) -> tuple[datetime, datetime]:
        now = self.clock()
        return now - delta, now

    # -------------------------
    # Reports
    # -------------------------
    def generate_audit_report(self, filters: Optional[AuditReportFilter] = None) -> list[AuditReportEntry]:
        filters = filters or AuditReportFilter()
        try:
            entries = self._collect(filters)
            self.recorder.audit_data_access(
                "GENERATE_AUDIT_REPORT",
                actor=SYSTEM_ACTOR,
                resource_type="AuditReport",
                filters=filters.as_dict(),
            )
        except Exception as exc:
            self.recorder.log_system_error(exc, context="AuditReportEngine.generate_audit_report")
            raise
        return entries

    def generate_user_activity_report(self, user_id: int, days: int = 30) -> list[AuditReportEntry]:
        start, end = self._window(timedelta(days=days))
        return self.generate_audit_report(AuditReportFilter(user_id=user_id, start_date=start, end_date=end))

    def generate_security_report(self, hours: int = 24) -> list[AuditReportEntry]:
        start, end = self._window(timedelta(hours=hours))
        return self.generate_audit_report(
            AuditReportFilter(category=AuditCategory.SECURITY.value, start_date=start, end_date=end)
        )

    def generate_usage_statistics(self, days: int = 7) -> dict[str, Any]:
        try:
            start, end = self._window(timedelta(days=days))
            entries = self.generate_audit_report(AuditReportFilter(start_date=start, end_date=end))
            stats = usage_statistics(entries)
            self.recorder.audit_data_access(
                "GENERATE_USAGE_STATISTICS",
                actor=SYSTEM_ACTOR,
                resource_type="UsageStatistics",
                filters={"days": days, "totalEntries": stats["totalOperations"]},
            )
        except Exception as exc:
            self.recorder.log_system_error(exc, context="AuditReportEngine.generate_usage_statistics")
            raise
        return stats

    def detect_suspicious_activity(self) -> list[dict[str, Any]]:
        try:
            start, end = self._window(timedelta(hours=24))
            entries = self.generate_audit_report(AuditReportFilter(start_date=start, end_date=end))
            patterns = detect_patterns(entries)
            self.recorder.audit_security(
                "SUSPICIOUS_ACTIVITY_DETECTION",
                details={"patternsFound": len(patterns), "patterns": [p.type for p in patterns]},
            )
        except Exception as exc:
            self.recorder.log_system_error(exc, context="AuditReportEngine.detect_suspicious_activity")
            raise

        if patterns:
            logger.warning("suspicious_activity_detected", patterns=[p.type for p in patterns])
        return [p.as_dict() for p in patterns]


# -------------------------------------------------------------------
# Folds
# -------------------------------------------------------------------

def _local_hour(entry: AuditReportEntry) -> int:
    return timezone.localtime(entry.timestamp).hour


def usage_statistics(entries: Iterable[AuditReportEntry]) -> dict[str, Any]:
    total = failed = 0
    by_category: Counter = Counter()
    by_user: Counter = Counter()
    by_hour: Counter = Counter()
    user_emails: dict[int, Optional[str]] = {}

    for entry in entries:
        total += 1
        if not entry.success:
            failed += 1
        by_category[entry.category] += 1
        by_hour[f"{_local_hour(entry):02d}"] += 1
        if entry.user_id:
            by_user[entry.user_id] += 1
            user_emails.setdefault(entry.user_id, entry.user_email)

    most_active = [
        {"userId": user_id, "operations": count, "email": user_emails.get(user_id)}
        for user_id, count in by_user.most_common(MOST_ACTIVE_USERS_LIMIT)
    ]

    return {
        "totalOperations": total,
        "successfulOperations": total - failed,
        "failedOperations": failed,
        "uniqueUsers": len(by_user),
        "operationsByCategory": dict(by_category),
        "operationsByUser": {str(k): v for k, v in by_user.items()},
        "operationsByHour": dict(sorted(by_hour.items())),
        "mostActiveUsers": most_active,
        "failureRate": f"{failed / total * 100:.2f}" if total else "0",
    }


def detect_patterns(entries: Iterable[AuditReportEntry]) -> list[SuspiciousPattern]:
    failures_by_ip: Counter = Counter()
    off_hours = 0
    per_user: dict[int, list[int]] = defaultdict(lambda: [0, 0])  # [total, failed]

    for entry in entries:
        if any(marker in entry.action for marker in LOGIN_FAILURE_MARKERS):
            failures_by_ip[entry.ip_address or "unknown"] += 1
        if _local_hour(entry) in OFF_HOURS:
            off_hours += 1
        if entry.user_id:
            counts = per_user[entry.user_id]
            counts[0] += 1
            if not entry.success:
                counts[1] += 1

    patterns: list[SuspiciousPattern] = []

    for ip, count in failures_by_ip.items():
        if count >= LOGIN_FAILURE_THRESHOLD:
            patterns.append(
                SuspiciousPattern(
                    type="MULTIPLE_LOGIN_FAILURES",
                    severity="HIGH",
                    description=f"{count} failed login attempts from IP {ip}",
                    extra={"ipAddress": ip, "count": count, "timespan": "24 hours"},
                )
            )

    if off_hours > OFF_HOURS_THRESHOLD:
        patterns.append(
            SuspiciousPattern(
                type="OFF_HOURS_ACTIVITY",
                severity="MEDIUM",
                description=f"{off_hours} operations during off-hours (2 AM - 6 AM)",
                extra={"count": off_hours, "timespan": "24 hours"},
            )
        )

    for user_id, (total, failed) in per_user.items():
        rate = failed / total
        if total >= FAILURE_RATE_MIN_OPERATIONS and rate >= FAILURE_RATE_THRESHOLD:
            patterns.append(
                SuspiciousPattern(
                    type="HIGH_FAILURE_RATE",
                    severity="MEDIUM",
                    description=f"User {user_id} has {rate * 100:.1f}% failure rate",
                    extra={
                        "userId": user_id,
                        "failureRate": f"{rate * 100:.1f}%",
                        "totalOperations": total,
                    },
                )
            )

    return patterns
