# library_core/statuses/api/serializers.py
from rest_framework import serializers

from library_core.statuses.models import Status


class StatusSerializer(serializers.ModelSerializer):
    class Meta:
        model = Status
        fields = ["id", "name", "created_at", "updated_at"]
        read_only_fields = fields
