from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

from django.db.models import QuerySet
from rest_framework import serializers
from rest_framework.response import Response


class PageQuerySerializer(serializers.Serializer):
    page = serializers.IntegerField(required=False, min_value=1, default=1)
    limit = serializers.IntegerField(required=False, min_value=1, max_value=100, default=10)


@dataclass(frozen=True)
class Page:
    items: list[Any]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


def page_queryset(queryset: QuerySet, *, page: int = 1, limit: int = 10) -> Page:
    """
    Offset pagination used by every list/search endpoint.
    totalPages = ceil(total / limit).
    """
    total = queryset.count()
    offset = (page - 1) * limit
    return Page(items=list(queryset[offset:offset + limit]), total=total, page=page, limit=limit)


def page_response(result: Page, serializer_class) -> Response:
    """
    Shared pagination contract:
      { data, total, page, limit, totalPages }
    """
    return Response(
        {
            "data": serializer_class(result.items, many=True).data,
            "total": result.total,
            "page": result.page,
            "limit": result.limit,
            "totalPages": result.total_pages,
        }
    )


def paginate(request, queryset: QuerySet, serializer_class) -> Response:
    params = PageQuerySerializer(data=request.query_params.dict())
    params.is_valid(raise_exception=True)
    return page_response(page_queryset(queryset, **params.validated_data), serializer_class)
