"""
- Propósito del módulo: tabla de ruteo principal; la API REST vive bajo
  ``/api/`` (``reservas.api_urls``) y la consola administrativa bajo ``/admin/``.
"""
from django.contrib import admin
from django.http import HttpResponseNotFound
from django.urls import path, include

urlpatterns = [
    # Bloquea "/api" exacto; la API se sirve con slash final.
    path("api", lambda request, *args, **kwargs: HttpResponseNotFound()),
    path("api/", include("reservas.api_urls")),
    path("api-auth/", include("rest_framework.urls")),
    path("admin/", admin.site.urls),
]
