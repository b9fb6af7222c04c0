# library_core/api/urls.py
from __future__ import annotations

from django.urls import path
from rest_framework.routers import DefaultRouter

from library_core.audit.api.views import AuditReportViewSet
from library_core.books.api.views import BookViewSet
from library_core.common.views import HealthView
from library_core.genres.api.views import GenreViewSet
from library_core.iam.api.auth import LoginView, LogoutView, ProfileView, RefreshView
from library_core.statuses.api.views import StatusViewSet
from library_core.users.api.views import UserViewSet

router = DefaultRouter()

router.register(r"users", UserViewSet, basename="users")
router.register(r"estados", StatusViewSet, basename="estados")
router.register(r"generos", GenreViewSet, basename="generos")
router.register(r"libros", BookViewSet, basename="libros")
router.register(r"audit", AuditReportViewSet, basename="audit")

urlpatterns = [
    # Auth
    path("auth/login/", LoginView.as_view(), name="login"),
    path("auth/refresh/", RefreshView.as_view(), name="refresh"),
    path("auth/logout/", LogoutView.as_view(), name="logout"),
    path("auth/profile/", ProfileView.as_view(), name="profile"),

    path("health/", HealthView.as_view(), name="health"),
]

urlpatterns += router.urls
