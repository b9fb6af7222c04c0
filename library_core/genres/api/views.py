# library_core/genres/api/views.py
from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from library_core.audit.decorators import AuditConfig, with_audit
from library_core.audit.entries import Actor
from library_core.common.api.pagination import page_queryset, page_response
from library_core.common.permissions import GenrePermission, is_staff_reader
from library_core.genres.api.serializers import (
    GenreCreateSerializer,
    GenreListQuerySerializer,
    GenreSearchQuerySerializer,
    GenreSerializer,
    GenreUpdateSerializer,
)
from library_core.genres.models import Genre
from library_core.genres.selectors import get_genre, list_genres, search_genres
from library_core.genres.services import GenreService


class GenreViewSet(viewsets.GenericViewSet):
    """
    Genres: readable by every authenticated user (plain users only see active ones),
    writable by librarians and admins, restorable by admins.
    """
    permission_classes = [GenrePermission]
    serializer_class = GenreSerializer
    queryset = Genre.objects.none()
    lookup_value_regex = r"\d+"

    def _active_only(self) -> bool:
        return not is_staff_reader(self.request.user)

    @extend_schema(tags=["Generos"], parameters=[GenreListQuerySerializer], responses={200: GenreSerializer(many=True)})
    def list(self, request):
        params = GenreListQuerySerializer(data=request.query_params.dict())
        params.is_valid(raise_exception=True)

        qs = list_genres(active_only=self._active_only())
        if not params.validated_data:
            return Response(GenreSerializer(qs, many=True).data)

        result = page_queryset(
            qs,
            page=params.validated_data.get("page", 1),
            limit=params.validated_data.get("limit", 10),
        )
        return page_response(result, GenreSerializer)

    @extend_schema(tags=["Generos"], parameters=[GenreSearchQuerySerializer], responses={200: GenreSerializer(many=True)})
    @action(detail=False, methods=["get"], url_path="search")
    def search(self, request):
        params = GenreSearchQuerySerializer(data=request.query_params.dict())
        params.is_valid(raise_exception=True)
        data = params.validated_data

        qs = search_genres(name=data.get("nombre"), status=data.get("estado"), active_only=self._active_only())
        return page_response(page_queryset(qs, page=data["page"], limit=data["limit"]), GenreSerializer)

    @extend_schema(tags=["Generos"], responses={200: GenreSerializer})
    def retrieve(self, request, pk=None):
        genre = get_genre(genre_id=int(pk), active_only=self._active_only())
        return Response(GenreSerializer(genre).data)

    @extend_schema(tags=["Generos"], request=GenreCreateSerializer, responses={201: GenreSerializer})
    @with_audit(AuditConfig.genre_management("CREATE_GENRE"))
    def create(self, request):
        s = GenreCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        genre = GenreService.create(**s.validated_data)
        return Response(GenreSerializer(genre).data, status=status.HTTP_201_CREATED)

    @extend_schema(tags=["Generos"], request=GenreUpdateSerializer, responses={200: GenreSerializer})
    @with_audit(AuditConfig.genre_management("UPDATE_GENRE"))
    def partial_update(self, request, pk=None):
        s = GenreUpdateSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        genre = GenreService.update(genre_id=int(pk), data=s.validated_data, actor=Actor.from_user(request.user))
        return Response(GenreSerializer(genre).data)

    @extend_schema(tags=["Generos"], responses={200: GenreSerializer})
    @with_audit(AuditConfig.genre_management("DELETE_GENRE"))
    def destroy(self, request, pk=None):
        genre = GenreService.remove(genre_id=int(pk))
        return Response(GenreSerializer(genre).data)

    @extend_schema(tags=["Generos"], request=None, responses={200: GenreSerializer})
    @action(detail=True, methods=["patch"], url_path="restore")
    @with_audit(AuditConfig.genre_management("RESTORE_GENRE"))
    def restore(self, request, pk=None):
        genre = GenreService.restore(genre_id=int(pk))
        return Response(GenreSerializer(genre).data)
