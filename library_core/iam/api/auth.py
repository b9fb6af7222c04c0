# library_core/iam/api/auth.py

from __future__ import annotations

from datetime import timedelta
from typing import Any

from django.conf import settings
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.exceptions import AuthenticationFailed
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError
from rest_framework_simplejwt.serializers import TokenRefreshSerializer

from library_core.iam.api.serializers import (
    DetailResponseSerializer,
    LoginRequestSerializer,
    LoginResponseSerializer,
    ProfileSerializer,
    RefreshRequestSerializer,
    RefreshResponseSerializer,
)
from library_core.iam.services import AuthService, public_profile


def _seconds(value: Any) -> int:
    """
    Convert a JWT lifetime setting into seconds.
    Supports timedelta OR int/float (already seconds).
    """
    if isinstance(value, timedelta):
        return int(value.total_seconds())
    try:
        return int(value)
    except (TypeError, ValueError):
        # 0 means "session cookie"
        return 0


def _jwt_cfg() -> dict:
    return getattr(settings, "SIMPLE_JWT", {}) or {}


def _set_auth_cookies(response: Response, *, access: str, refresh: str) -> None:
    jwt_cfg = _jwt_cfg()

    secure = bool(jwt_cfg.get("AUTH_COOKIE_SECURE", False))
    samesite = jwt_cfg.get("AUTH_COOKIE_SAMESITE", "Lax")

    for name, value, lifetime in (
        (jwt_cfg.get("AUTH_COOKIE", "lib_access"), access, jwt_cfg.get("ACCESS_TOKEN_LIFETIME")),
        (jwt_cfg.get("AUTH_COOKIE_REFRESH", "lib_refresh"), refresh, jwt_cfg.get("REFRESH_TOKEN_LIFETIME")),
    ):
        response.set_cookie(
            name,
            value,
            max_age=_seconds(lifetime),
            httponly=True,
            secure=secure,
            samesite=samesite,
            path="/",
        )


def _clear_auth_cookies(response: Response) -> None:
    jwt_cfg = _jwt_cfg()
    response.delete_cookie(jwt_cfg.get("AUTH_COOKIE", "lib_access"), path="/")
    response.delete_cookie(jwt_cfg.get("AUTH_COOKIE_REFRESH", "lib_refresh"), path="/")


class TokenEndpointView(APIView):
    """
    Token endpoints run unauthenticated. Credential failures answer 401 with a Bearer challenge.
    """
    permission_classes = [AllowAny]
    authentication_classes = []

    def get_authenticate_header(self, request):
        return 'Bearer realm="api"'


class LoginView(TokenEndpointView):
    """
    The audit middleware records LOGIN_SUCCESS / LOGIN_FAILURE for this endpoint.
    """

    @extend_schema(
        request=LoginRequestSerializer,
        responses={200: LoginResponseSerializer},
        tags=["Auth"],
    )
    def post(self, request):
        s = LoginRequestSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        result = AuthService.login(
            email=s.validated_data["email"],
            password=s.validated_data["password"],
            request=request,
        )
        # Lets the middleware attribute the success entry to this user.
        request.user = result.user

        res = Response(
            {
                "access_token": result.access_token,
                "refresh_token": result.refresh_token,
                "user": public_profile(result.user),
            },
            status=status.HTTP_200_OK,
        )
        _set_auth_cookies(res, access=result.access_token, refresh=result.refresh_token)
        return res


class RefreshView(TokenEndpointView):
    @extend_schema(
        request=RefreshRequestSerializer,
        responses={200: RefreshResponseSerializer},
        tags=["Auth"],
    )
    def post(self, request):
        refresh = request.data.get("refresh") or request.COOKIES.get(_jwt_cfg().get("AUTH_COOKIE_REFRESH", "lib_refresh"))
        if not refresh:
            raise AuthenticationFailed("Refresh token requerido")

        serializer = TokenRefreshSerializer(data={"refresh": refresh})
        try:
            serializer.is_valid(raise_exception=True)
        except TokenError as e:
            raise InvalidToken(e.args[0]) from e

        access = serializer.validated_data["access"]
        new_refresh = serializer.validated_data.get("refresh", refresh)

        res = Response({"access_token": access, "refresh_token": new_refresh}, status=status.HTTP_200_OK)
        _set_auth_cookies(res, access=access, refresh=new_refresh)
        return res


class LogoutView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        request=None,
        responses={200: DetailResponseSerializer},
        tags=["Auth"],
    )
    def post(self, request):
        res = Response({"detail": "Sesión cerrada"}, status=status.HTTP_200_OK)
        _clear_auth_cookies(res)
        return res


class ProfileView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(responses={200: ProfileSerializer}, tags=["Auth"])
    def get(self, request):
        return Response(public_profile(request.user))
