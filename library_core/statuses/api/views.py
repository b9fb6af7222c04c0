# library_core/statuses/api/views.py
from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import viewsets
from rest_framework.response import Response

from library_core.common.permissions import AdminOnlyPermission
from library_core.statuses.api.serializers import StatusSerializer
from library_core.statuses.models import Status
from library_core.statuses.selectors import StatusSelector


class StatusViewSet(viewsets.ViewSet):
    permission_classes = [AdminOnlyPermission]

    serializer_class = StatusSerializer
    queryset = Status.objects.none()

    @extend_schema(tags=["Estados"], responses={200: StatusSerializer(many=True)})
    def list(self, request):
        return Response(StatusSerializer(StatusSelector.list_statuses(), many=True).data)
