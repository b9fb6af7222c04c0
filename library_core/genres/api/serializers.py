# library_core/genres/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from library_core.genres.models import Genre
from library_core.statuses.models import STATUS_ACTIVE, STATUS_DELETED


class GenreSerializer(serializers.ModelSerializer):
    status = serializers.CharField(source="status.name", read_only=True)

    class Meta:
        model = Genre
        fields = [
            "id",
            "name",
            "description",
            "status_id",
            "status",
            "created_at",
            "updated_at",
            "deleted_at",
            "restored_at",
        ]
        read_only_fields = fields


class GenreCreateSerializer(serializers.Serializer):
    name = serializers.CharField(min_length=2, max_length=100)
    description = serializers.CharField(required=False, allow_blank=True, default="", max_length=500)


class GenreUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(min_length=2, max_length=100, required=False)
    description = serializers.CharField(required=False, allow_blank=True, max_length=500)

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError("Debe enviar al menos un campo.")
        return attrs


class GenreListQuerySerializer(serializers.Serializer):
    """
    Listing is unpaginated unless page or limit is given.
    """
    page = serializers.IntegerField(required=False, min_value=1)
    limit = serializers.IntegerField(required=False, min_value=1, max_value=100)


class GenreSearchQuerySerializer(serializers.Serializer):
    nombre = serializers.CharField(required=False, allow_blank=True, max_length=100)
    estado = serializers.ChoiceField(choices=[STATUS_ACTIVE, STATUS_DELETED], required=False)
    page = serializers.IntegerField(required=False, min_value=1, default=1)
    limit = serializers.IntegerField(required=False, min_value=1, max_value=100, default=10)
