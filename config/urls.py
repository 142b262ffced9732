"""URL configuration for the booking manager.

Every API lives under the versioned `api/v1/` prefix; the OpenAPI schema
and Swagger UI are served next to it.
"""
from django.contrib import admin  # type: ignore
from django.urls import path, include  # type: ignore
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView  # type: ignore

urlpatterns = [
    path('admin/', admin.site.urls),
    # Application URLs
    path('api/v1/auth/', include(('apps.users.auth_urls', 'auth'), namespace='auth')),
    path('api/v1/users/', include('apps.users.urls')),
    path('api/v1/apartments/', include('apps.apartments.urls')),
    path('api/v1/bookings/', include('apps.bookings.urls')),
    path('api/v1/audit/', include('apps.audit.urls')),
    path('api/v1/backup/', include('apps.backup.urls')),
    # API docs
    path('api/v1/schema/', SpectacularAPIView.as_view(), name='schema'),
    path('api/v1/docs/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),
]
