# config/urls.py
from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.urls import include, path

from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView

urlpatterns = [
    path("admin/", admin.site.urls),

    # OpenAPI
    path("api/schema/", SpectacularAPIView.as_view(urlconf="library_core.api.urls"), name="schema"),
    path("api/docs/", SpectacularSwaggerView.as_view(url_name="schema"), name="swagger-ui"),

    # Primary versioned API
    path("api/v1/", include("library_core.api.urls")),

    # Unversioned alias for older clients. Keep AFTER schema/docs so those explicit routes win.
    path("api/", include("library_core.api.urls")),
]

# Uploaded book covers (dev only; production serves MEDIA_ROOT from the web server)
urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
