# library_core/users/api/views.py
from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from library_core.audit.decorators import AuditConfig, with_audit
from library_core.audit.entries import Actor
from library_core.common.api.pagination import paginate
from library_core.common.permissions import AdminOnlyPermission
from library_core.users.api.serializers import (
    ChangePasswordSerializer,
    UserCreateSerializer,
    UserSerializer,
    UserUpdateSerializer,
)
from library_core.users.models import User
from library_core.users.selectors import get_user, list_active_users, list_users, search_users
from library_core.users.services import UserService


class UserViewSet(viewsets.GenericViewSet):
    """
    User administration (admin only):
    - list (paginated, newest first) / retrieve / active
    - create / partial_update
    - destroy (soft) / restore
    - search/{query}
    - password
    """
    permission_classes = [AdminOnlyPermission]
    serializer_class = UserSerializer
    queryset = User.objects.none()
    lookup_value_regex = r"\d+"

    @extend_schema(tags=["Users"], responses={200: UserSerializer(many=True)})
    def list(self, request):
        return paginate(request, list_users(), UserSerializer)

    @extend_schema(tags=["Users"], responses={200: UserSerializer})
    def retrieve(self, request, pk=None):
        return Response(UserSerializer(get_user(user_id=int(pk))).data)

    @extend_schema(tags=["Users"], request=UserCreateSerializer, responses={201: UserSerializer})
    @with_audit(AuditConfig.user_management("CREATE_USER"))
    def create(self, request):
        s = UserCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        user = UserService.create(
            email=data["email"],
            name=data["name"],
            password=data["password"],
            role=data.get("role"),
            age=data.get("age"),
        )
        return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)

    @extend_schema(tags=["Users"], request=UserUpdateSerializer, responses={200: UserSerializer})
    @with_audit(AuditConfig.user_management("UPDATE_USER"))
    def partial_update(self, request, pk=None):
        s = UserUpdateSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        user = UserService.update(
            user_id=int(pk),
            data=s.validated_data,
            actor=Actor.from_user(request.user),
        )
        return Response(UserSerializer(user).data)

    @extend_schema(tags=["Users"], responses={200: UserSerializer})
    @with_audit(AuditConfig.user_management("DELETE_USER"))
    def destroy(self, request, pk=None):
        user = UserService.remove(user_id=int(pk))
        return Response(UserSerializer(user).data)

    @extend_schema(tags=["Users"], request=None, responses={200: UserSerializer})
    @action(detail=True, methods=["post"], url_path="restore")
    @with_audit(AuditConfig.user_management("RESTORE_USER"))
    def restore(self, request, pk=None):
        user = UserService.restore(user_id=int(pk))
        return Response(UserSerializer(user).data)

    @extend_schema(tags=["Users"], responses={200: UserSerializer(many=True)})
    @action(detail=False, methods=["get"], url_path="active")
    def active(self, request):
        return Response(UserSerializer(list_active_users(), many=True).data)

    @extend_schema(tags=["Users"], responses={200: UserSerializer(many=True)})
    @action(detail=False, methods=["get"], url_path=r"search/(?P<query>[^/]+)")
    def search(self, request, query=None):
        return Response(UserSerializer(search_users(query=query), many=True).data)

    @extend_schema(tags=["Users"], request=ChangePasswordSerializer, responses={204: None})
    @action(detail=True, methods=["post"], url_path="password")
    @with_audit(AuditConfig.user_management("CHANGE_PASSWORD"))
    def password(self, request, pk=None):
        s = ChangePasswordSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        UserService.change_password(
            user_id=int(pk),
            current_password=s.validated_data["currentPassword"],
            new_password=s.validated_data["newPassword"],
        )
        return Response(status=status.HTTP_204_NO_CONTENT)
