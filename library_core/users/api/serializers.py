# library_core/users/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from library_core.users.models import User, UserRole


class UserSerializer(serializers.ModelSerializer):
    status = serializers.CharField(source="status.name", read_only=True)

    class Meta:
        model = User
        fields = [
            "id",
            "email",
            "name",
            "age",
            "role",
            "status_id",
            "status",
            "created_at",
            "updated_at",
            "deleted_at",
            "restored_at",
        ]
        read_only_fields = fields


class UserCreateSerializer(serializers.Serializer):
    email = serializers.EmailField(max_length=100)
    name = serializers.CharField(min_length=2, max_length=100, trim_whitespace=True)
    password = serializers.CharField(min_length=8, max_length=128, write_only=True, trim_whitespace=False)
    confirmPassword = serializers.CharField(write_only=True, trim_whitespace=False)
    role = serializers.ChoiceField(choices=UserRole.choices, required=False, default=UserRole.USER)
    age = serializers.IntegerField(min_value=13, max_value=120, required=False, allow_null=True)

    def validate_email(self, value: str) -> str:
        return value.strip().lower()

    def validate(self, attrs):
        if attrs["password"] != attrs["confirmPassword"]:
            raise serializers.ValidationError({"confirmPassword": "Las contraseñas no coinciden"})
        return attrs


class UserUpdateSerializer(serializers.Serializer):
    """
    Partial update contract (PATCH). Passwords change through /password/.
    """
    email = serializers.EmailField(max_length=100, required=False)
    name = serializers.CharField(min_length=2, max_length=100, required=False)
    role = serializers.ChoiceField(choices=UserRole.choices, required=False)
    age = serializers.IntegerField(min_value=13, max_value=120, required=False, allow_null=True)

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError("Debe enviar al menos un campo.")
        return attrs


class ChangePasswordSerializer(serializers.Serializer):
    currentPassword = serializers.CharField(trim_whitespace=False)
    newPassword = serializers.CharField(min_length=8, max_length=128, trim_whitespace=False)
    confirmPassword = serializers.CharField(trim_whitespace=False)

    def validate(self, attrs):
        if attrs["newPassword"] != attrs["confirmPassword"]:
            raise serializers.ValidationError({"confirmPassword": "Las contraseñas no coinciden"})
        return attrs
