"""
===============================================================================
Propósito:
    Exponer el catálogo de recursos reservables mediante viewsets de Django
    REST Framework.
API pública:
    ``ResourceTypeViewSet`` y ``ResourceViewSet`` registrados en
    ``reservas/api_urls.py``.
Flujo de datos:
    Request REST → permisos → queryset → serializador → respuesta JSON.
Decisiones:
    Lectura para cualquier usuario autenticado y escritura solo para
    administradores (``IsAdminOrReadOnly``). La eliminación es lógica y se
    rechaza mientras existan reservas activas o recursos vigentes; con ellos,
    la edición se limita a campos descriptivos.
===============================================================================
"""

from rest_framework import permissions, status, viewsets
from rest_framework.exceptions import APIException
from rest_framework.response import Response

from accounts.roles import is_admin
from bookings.exceptions import ForbiddenFields

from . import services
from .models import LifecycleState, Resource, ResourceType
from .serializers import ResourceSerializer, ResourceTypeSerializer


class CatalogInUse(APIException):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_detail = "El elemento del catálogo está en uso."
    default_code = "catalog_in_use"

    def __init__(self, message=None):
        message = str(message or self.default_detail)
        super().__init__(message)
        self.detail = {"message": message, "category": self.default_code}


class IsAdminOrReadOnly(permissions.BasePermission):
    """Permite lectura a cualquiera autenticado y escritura solo a administradores."""

    def has_permission(self, request, view):
        if request.method in permissions.SAFE_METHODS:
            return bool(request.user and request.user.is_authenticated)
        return is_admin(request.user)


def _reject_restricted_fields(data, allowed: tuple[str, ...], message: str) -> None:
    invalid = [key for key in data.keys() if key not in allowed]
    if invalid:
        raise ForbiddenFields(invalid, message=message)


class ResourceTypeViewSet(viewsets.ModelViewSet):
    """CRUD de tipos de recurso; un tipo con recursos vigentes solo cambia de nombre."""

    serializer_class = ResourceTypeSerializer
    permission_classes = [IsAdminOrReadOnly]
    queryset = ResourceType.objects.exclude(state=LifecycleState.DELETED)

    def get_queryset(self):
        qs = super().get_queryset()
        if self.action == "list" and not is_admin(self.request.user):
            qs = qs.filter(state=LifecycleState.ACTIVE)
        return qs

    def perform_update(self, serializer):
        if services.has_live_resources(serializer.instance):
            _reject_restricted_fields(
                self.request.data,
                ("nombre",),
                "El tipo tiene recursos asociados: solo puede modificarse el nombre.",
            )
        serializer.save()

    def destroy(self, request, *args, **kwargs):
        resource_type = self.get_object()
        if services.has_live_resources(resource_type):
            raise CatalogInUse("No se puede eliminar un tipo de recurso con recursos asociados.")
        resource_type.state = LifecycleState.DELETED
        resource_type.save(update_fields=["state", "updated_at"])
        return Response({"message": "Tipo de recurso eliminado correctamente"}, status=status.HTTP_200_OK)


class ResourceViewSet(viewsets.ModelViewSet):
    """CRUD de recursos con filtros opcionales por tipo y disponibilidad."""

    serializer_class = ResourceSerializer
    permission_classes = [IsAdminOrReadOnly]
    queryset = Resource.objects.select_related("resource_type").exclude(state=LifecycleState.DELETED)

    def get_queryset(self):
        qs = super().get_queryset()
        params = self.request.query_params
        if self.action == "list" and not is_admin(self.request.user):
            qs = qs.filter(state=LifecycleState.ACTIVE)
        type_id = params.get("tipo_recurso_id")
        if type_id:
            try:
                qs = qs.filter(resource_type_id=int(type_id))
            except (TypeError, ValueError):
                qs = qs.none()
        available = (params.get("disponible") or "").strip().lower()
        if available in {"1", "true"}:
            qs = qs.filter(state=LifecycleState.ACTIVE, is_available=True)
        return qs

    def perform_update(self, serializer):
        if services.has_active_reservations(serializer.instance):
            _reject_restricted_fields(
                self.request.data,
                ("nombre", "descripcion", "ubicacion"),
                "El recurso tiene reservas activas: solo pueden modificarse nombre, descripción y ubicación.",
            )
        serializer.save()

    def destroy(self, request, *args, **kwargs):
        resource = self.get_object()
        if services.has_active_reservations(resource):
            raise CatalogInUse("No se puede eliminar un recurso con reservas activas.")
        resource.state = LifecycleState.DELETED
        resource.save(update_fields=["state", "updated_at"])
        return Response({"message": "Recurso eliminado correctamente"}, status=status.HTTP_200_OK)
