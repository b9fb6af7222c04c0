# library_core/books/api/views.py
from __future__ import annotations

from django.http import HttpResponse
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.response import Response

from library_core.audit.decorators import AuditConfig, with_audit
from library_core.audit.entries import Actor
from library_core.books.api.serializers import (
    BookCreateSerializer,
    BookImageUploadSerializer,
    BookSerializer,
    BookUpdateSerializer,
)
from library_core.books.exports import books_to_csv
from library_core.books.filters import filter_books
from library_core.books.models import Book
from library_core.books.selectors import books_qs, get_book, list_books
from library_core.books.services import BookService
from library_core.common.api.pagination import paginate
from library_core.common.permissions import BookPermission, is_staff_reader

SEARCH_PARAMETERS = [
    OpenApiParameter(name="titulo", type=OpenApiTypes.STR, location=OpenApiParameter.QUERY, required=False,
                     description="Partial, case- and accent-insensitive title match."),
    OpenApiParameter(name="autor", type=OpenApiTypes.STR, location=OpenApiParameter.QUERY, required=False),
    OpenApiParameter(name="editorial", type=OpenApiTypes.STR, location=OpenApiParameter.QUERY, required=False),
    OpenApiParameter(name="generoId", type=OpenApiTypes.INT, location=OpenApiParameter.QUERY, required=False),
    OpenApiParameter(name="estado", type=OpenApiTypes.STR, location=OpenApiParameter.QUERY, required=False,
                     enum=["activo", "eliminado"]),
]

PAGE_PARAMETERS = [
    OpenApiParameter(name="page", type=OpenApiTypes.INT, location=OpenApiParameter.QUERY, required=False),
    OpenApiParameter(name="limit", type=OpenApiTypes.INT, location=OpenApiParameter.QUERY, required=False),
]


class BookViewSet(viewsets.GenericViewSet):
    """
    Books:
    - list / search (paginated) / export/csv / retrieve: any authenticated user,
      plain users only see active books
    - create / partial_update / destroy (soft) / restore / imagen: librarians and admins
    """
    permission_classes = [BookPermission]
    serializer_class = BookSerializer
    queryset = Book.objects.none()
    lookup_value_regex = r"\d+"

    def _active_only(self) -> bool:
        return not is_staff_reader(self.request.user)

    @extend_schema(tags=["Libros"], parameters=PAGE_PARAMETERS, responses={200: BookSerializer(many=True)})
    def list(self, request):
        return paginate(request, list_books(active_only=self._active_only()), BookSerializer)

    @extend_schema(
        tags=["Libros"],
        parameters=SEARCH_PARAMETERS + PAGE_PARAMETERS,
        responses={200: BookSerializer(many=True)},
    )
    @action(detail=False, methods=["get"], url_path="search")
    def search(self, request):
        qs = filter_books(request.query_params, books_qs(active_only=self._active_only()))
        return paginate(request, qs, BookSerializer)

    @extend_schema(tags=["Libros"], parameters=SEARCH_PARAMETERS, responses={(200, "text/csv"): OpenApiTypes.STR})
    @action(detail=False, methods=["get"], url_path="export/csv")
    def export_csv(self, request):
        qs = filter_books(request.query_params, books_qs(active_only=self._active_only()))

        res = HttpResponse(books_to_csv(qs), content_type="text/csv; charset=utf-8")
        res["Content-Disposition"] = 'attachment; filename="libros.csv"'
        return res

    @extend_schema(tags=["Libros"], responses={200: BookSerializer})
    def retrieve(self, request, pk=None):
        book = get_book(book_id=int(pk), active_only=self._active_only())
        return Response(BookSerializer(book).data)

    @extend_schema(tags=["Libros"], request=BookCreateSerializer, responses={201: BookSerializer})
    @with_audit(AuditConfig.book_management("CREATE_BOOK"))
    def create(self, request):
        s = BookCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        book = BookService.create(**s.validated_data)
        return Response(BookSerializer(book).data, status=status.HTTP_201_CREATED)

    @extend_schema(tags=["Libros"], request=BookUpdateSerializer, responses={200: BookSerializer})
    @with_audit(AuditConfig.book_management("UPDATE_BOOK"))
    def partial_update(self, request, pk=None):
        s = BookUpdateSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        book = BookService.update(book_id=int(pk), data=s.validated_data, actor=Actor.from_user(request.user))
        return Response(BookSerializer(book).data)

    @extend_schema(tags=["Libros"], responses={200: BookSerializer})
    @with_audit(AuditConfig.book_management("DELETE_BOOK"))
    def destroy(self, request, pk=None):
        book = BookService.remove(book_id=int(pk))
        return Response(BookSerializer(book).data)

    @extend_schema(tags=["Libros"], request=None, responses={200: BookSerializer})
    @action(detail=True, methods=["patch"], url_path="restore")
    @with_audit(AuditConfig.book_management("RESTORE_BOOK"))
    def restore(self, request, pk=None):
        book = BookService.restore(book_id=int(pk))
        return Response(BookSerializer(book).data)

    @extend_schema(
        tags=["Libros"],
        request={"multipart/form-data": BookImageUploadSerializer},
        responses={200: BookSerializer},
    )
    @action(
        detail=True,
        methods=["post"],
        url_path="imagen",
        parser_classes=[MultiPartParser, FormParser],
    )
    @with_audit(AuditConfig.book_management("UPLOAD_BOOK_IMAGE"))
    def upload_image(self, request, pk=None):
        s = BookImageUploadSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        book = BookService.update_image(book_id=int(pk), upload=s.validated_data["imagen"])
        return Response({"message": "Imagen subida exitosamente", **BookSerializer(book).data})
