# library_core/iam/services.py
from __future__ import annotations

from dataclasses import dataclass

from django.contrib.auth import authenticate
from django.contrib.auth.models import update_last_login
from rest_framework.exceptions import AuthenticationFailed
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.settings import api_settings
from rest_framework_simplejwt.tokens import AccessToken, RefreshToken

from library_core.users.models import User

INVALID_CREDENTIALS = "Credenciales inválidas"


@dataclass(frozen=True)
class LoginResult:
    user: User
    access_token: str
    refresh_token: str


def public_profile(user: User) -> dict:
    return {
        "id": user.pk,
        "email": user.email,
        "name": user.name,
        "age": user.age,
        "role": user.role,
    }


class AuthService:
    @staticmethod
    def login(*, email: str, password: str, request=None) -> LoginResult:
        """
        Credentials -> signed token pair. Unknown email, wrong password and
        soft-deleted accounts all fail with the same message.
        """
        user = authenticate(request, email=(email or "").strip().lower(), password=password)
        if user is None:
            raise AuthenticationFailed(INVALID_CREDENTIALS)

        refresh = RefreshToken.for_user(user)
        if api_settings.UPDATE_LAST_LOGIN:
            update_last_login(None, user)

        return LoginResult(user=user, access_token=str(refresh.access_token), refresh_token=str(refresh))

    @staticmethod
    def resolve_user_id(token: str) -> int:
        """
        Access token -> user id, for callers that hold a raw token.
        """
        try:
            validated = AccessToken(token)
        except TokenError as exc:
            raise AuthenticationFailed("Token inválido o expirado") from exc
        return int(validated[api_settings.USER_ID_CLAIM])
