# library_core/audit/api/views.py
from __future__ import annotations

from contextlib import contextmanager
from typing import Any

from django.utils import timezone
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from library_core.audit.api.serializers import (
    AuditReportEntrySerializer,
    AuditReportQuerySerializer,
    DaysWindowQuerySerializer,
    HoursWindowQuerySerializer,
    StatisticsQuerySerializer,
)
from library_core.audit.entries import Actor, ClientInfo, format_timestamp
from library_core.audit.recorder import get_audit_recorder
from library_core.audit.reports import AuditReportEngine, AuditReportFilter
from library_core.audit.sink import get_log_sink
from library_core.common.api.exceptions import AuditLogReadError
from library_core.common.permissions import AdminOnlyPermission


@contextmanager
def _reading_logs():
    try:
        yield
    except OSError as exc:
        raise AuditLogReadError() from exc


def _validated(serializer_class, request) -> dict[str, Any]:
    s = serializer_class(data=request.query_params.dict())
    s.is_valid(raise_exception=True)
    return s.validated_data


class AuditReportViewSet(viewsets.ViewSet):
    """
    Admin-only queries over the audit trail:
    - reports (filtered)
    - user-activity/{userId}
    - security
    - statistics
    - suspicious-activity

    Every access is itself recorded as a SECURITY entry.
    """
    permission_classes = [AdminOnlyPermission]

    def _engine(self) -> AuditReportEngine:
        return AuditReportEngine(get_log_sink(), get_audit_recorder())

    def _record_access(self, request, action_name: str, details: dict[str, Any]) -> None:
        user = request.user
        get_audit_recorder().audit_security(
            action_name,
            details={**details, "adminId": user.pk, "adminEmail": user.email},
            actor=Actor.from_user(user),
            client=ClientInfo.from_request(request),
        )

    def _envelope(self, request, payload: dict[str, Any]) -> Response:
        body = {
            "success": True,
            **payload,
            "generatedAt": format_timestamp(timezone.now()),
            "generatedBy": {"userId": request.user.pk, "email": request.user.email},
        }
        return Response(body, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["Audit"],
        parameters=[AuditReportQuerySerializer],
        responses={200: AuditReportEntrySerializer(many=True)},
    )
    @action(detail=False, methods=["get"], url_path="reports")
    def reports(self, request):
        filters = AuditReportFilter(**_validated(AuditReportQuerySerializer, request))

        with _reading_logs():
            report = self._engine().generate_audit_report(filters)

        self._record_access(
            request,
            "AUDIT_REPORT_ACCESS",
            {"filters": filters.as_dict(), "resultCount": len(report)},
        )
        return self._envelope(
            request,
            {
                "filters": filters.as_dict(),
                "totalEntries": len(report),
                "data": [e.as_dict() for e in report],
            },
        )

    @extend_schema(
        tags=["Audit"],
        parameters=[
            OpenApiParameter(name="user_id", type=OpenApiTypes.INT, location=OpenApiParameter.PATH),
            DaysWindowQuerySerializer,
        ],
        responses={200: AuditReportEntrySerializer(many=True)},
    )
    @action(detail=False, methods=["get"], url_path=r"user-activity/(?P<user_id>[0-9]+)")
    def user_activity(self, request, user_id=None):
        target_id = int(user_id)
        days = _validated(DaysWindowQuerySerializer, request)["days"]

        with _reading_logs():
            report = self._engine().generate_user_activity_report(target_id, days)

        self._record_access(
            request,
            "USER_ACTIVITY_REPORT_ACCESS",
            {"targetUserId": target_id, "days": days, "resultCount": len(report)},
        )
        return self._envelope(
            request,
            {
                "userId": target_id,
                "days": days,
                "totalEntries": len(report),
                "data": [e.as_dict() for e in report],
            },
        )

    @extend_schema(
        tags=["Audit"],
        parameters=[HoursWindowQuerySerializer],
        responses={200: AuditReportEntrySerializer(many=True)},
    )
    @action(detail=False, methods=["get"], url_path="security")
    def security(self, request):
        hours = _validated(HoursWindowQuerySerializer, request)["hours"]

        with _reading_logs():
            report = self._engine().generate_security_report(hours)

        self._record_access(request, "SECURITY_REPORT_ACCESS", {"hours": hours, "resultCount": len(report)})
        return self._envelope(
            request,
            {
                "hours": hours,
                "totalEntries": len(report),
                "data": [e.as_dict() for e in report],
            },
        )

    @extend_schema(
        tags=["Audit"],
        parameters=[StatisticsQuerySerializer],
        responses={200: OpenApiTypes.OBJECT},
    )
    @action(detail=False, methods=["get"], url_path="statistics")
    def statistics(self, request):
        days = _validated(StatisticsQuerySerializer, request)["days"]

        with _reading_logs():
            stats = self._engine().generate_usage_statistics(days)

        self._record_access(
            request,
            "USAGE_STATISTICS_ACCESS",
            {"days": days, "totalOperations": stats["totalOperations"]},
        )
        return self._envelope(request, {"days": days, "data": stats})

    @extend_schema(tags=["Audit"], responses={200: OpenApiTypes.OBJECT})
    @action(detail=False, methods=["get"], url_path="suspicious-activity")
    def suspicious_activity(self, request):
        with _reading_logs():
            patterns = self._engine().detect_suspicious_activity()

        self._record_access(request, "SUSPICIOUS_ACTIVITY_ACCESS", {"patternsFound": len(patterns)})
        return self._envelope(
            request,
            {
                "timespan": "24 hours",
                "patternsFound": len(patterns),
                "data": patterns,
            },
        )
