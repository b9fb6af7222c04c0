# library_core/audit/api/serializers.py
from __future__ import annotations

from rest_framework import serializers
from rest_framework.settings import ISO_8601

from library_core.audit.entries import AuditCategory

DATE_INPUT_FORMATS = [ISO_8601, "%Y-%m-%d"]


class AuditReportQuerySerializer(serializers.Serializer):
    """
    Query string of GET /audit/reports/. Keys are camelCase on the wire.
    """
    startDate = serializers.DateTimeField(source="start_date", required=False, input_formats=DATE_INPUT_FORMATS)
    endDate = serializers.DateTimeField(source="end_date", required=False, input_formats=DATE_INPUT_FORMATS)
    userId = serializers.IntegerField(source="user_id", required=False, min_value=1)
    category = serializers.ChoiceField(choices=[c.value for c in AuditCategory], required=False)
    action = serializers.CharField(required=False, allow_blank=False, max_length=100)
    success = serializers.BooleanField(required=False)
    ipAddress = serializers.IPAddressField(source="ip_address", required=False)

    def validate(self, attrs):
        start, end = attrs.get("start_date"), attrs.get("end_date")
        if start and end and start > end:
            raise serializers.ValidationError({"startDate": "startDate must be before endDate."})
        return attrs


class DaysWindowQuerySerializer(serializers.Serializer):
    days = serializers.IntegerField(required=False, min_value=1, max_value=365, default=30)


class StatisticsQuerySerializer(serializers.Serializer):
    days = serializers.IntegerField(required=False, min_value=1, max_value=365, default=7)


class HoursWindowQuerySerializer(serializers.Serializer):
    hours = serializers.IntegerField(required=False, min_value=1, max_value=24 * 365, default=24)


class AuditReportEntrySerializer(serializers.Serializer):
    timestamp = serializers.CharField()
    category = serializers.CharField()
    action = serializers.CharField()
    userId = serializers.IntegerField(allow_null=True)
    userEmail = serializers.CharField(allow_null=True)
    success = serializers.BooleanField()
    resourceType = serializers.CharField(allow_null=True)
    resourceId = serializers.IntegerField(allow_null=True)
    ipAddress = serializers.CharField(allow_null=True)
    details = serializers.JSONField(allow_null=True)
