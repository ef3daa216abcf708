"""
URL configuration for the hospital directory project.

The API routes live in :mod:`registry.routers`; this module mounts them
next to the Prometheus metrics endpoint and the OpenAPI documentation
exposed at ``/swagger/`` and ``/redoc/``.
"""
from django.urls import path, include

from rest_framework import permissions
from drf_yasg.views import get_schema_view
from drf_yasg import openapi

# API metadata for Swagger/OpenAPI documentation
api_info = openapi.Info(
    title="Hospital Directory API",
    default_version='v1',
    description="Hospitals, departments and role-scoped user registration.",
)

schema_view = get_schema_view(
    api_info,
    public=True,
    permission_classes=(permissions.AllowAny,),
)

urlpatterns = [
    path('', include('django_prometheus.urls')),
    path('', include('registry.routers')),
    # Swagger and ReDoc
    path('swagger/', schema_view.with_ui('swagger', cache_timeout=0), name='schema-swagger-ui'),
    path('redoc/', schema_view.with_ui('redoc', cache_timeout=0), name='schema-redoc'),
]

handler404 = 'registry.views.errors.not_found'
