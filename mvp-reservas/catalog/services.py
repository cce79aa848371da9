"""Consultas del catálogo usadas por el motor de reservas y la API."""

from __future__ import annotations

from .models import LifecycleState, Resource, ResourceType


def resource_exists(resource_id) -> bool:
    return Resource.objects.filter(pk=resource_id).exists()


def lock_resources(resource_ids) -> dict[int, Resource]:
    """Bloquea las filas de los recursos indicados (en orden de id) hasta el fin
    de la transacción en curso. Los ids inexistentes no aparecen en el resultado.
    """

    qs = Resource.objects.select_for_update().filter(pk__in=list(resource_ids)).order_by("pk")
    return {resource.pk: resource for resource in qs}


def has_active_reservations(resource: Resource) -> bool:
    from bookings.models import Reservation  # Evita import circular catalog ↔ bookings

    return resource.reservations.filter(status=Reservation.Status.ACTIVE).exists()


def has_live_resources(resource_type: ResourceType) -> bool:
    """Tipos con recursos activos o inactivos no pueden eliminarse ni cambiar de estado."""

    return resource_type.resources.exclude(state=LifecycleState.DELETED).exists()
