# library_core/books/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from library_core.books.models import Book


class BookSerializer(serializers.ModelSerializer):
    status = serializers.CharField(source="status.name", read_only=True)
    genre = serializers.CharField(source="genre.name", read_only=True)

    class Meta:
        model = Book
        fields = [
            "id",
            "title",
            "author",
            "publisher",
            "price",
            "availability",
            "image_url",
            "genre_id",
            "genre",
            "status_id",
            "status",
            "created_at",
            "updated_at",
            "deleted_at",
            "restored_at",
        ]
        read_only_fields = fields


class BookCreateSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=255)
    author = serializers.CharField(max_length=255)
    publisher = serializers.CharField(max_length=255)
    price = serializers.IntegerField(min_value=0)
    availability = serializers.IntegerField(min_value=0, required=False, default=0)
    genre_id = serializers.IntegerField(min_value=1)


class BookUpdateSerializer(serializers.Serializer):
    """
    Partial update contract (PATCH).
    """
    title = serializers.CharField(max_length=255, required=False)
    author = serializers.CharField(max_length=255, required=False)
    publisher = serializers.CharField(max_length=255, required=False)
    price = serializers.IntegerField(min_value=0, required=False)
    availability = serializers.IntegerField(min_value=0, required=False)
    genre_id = serializers.IntegerField(min_value=1, required=False)

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError("Debe enviar al menos un campo.")
        return attrs


class BookImageUploadSerializer(serializers.Serializer):
    imagen = serializers.FileField()

