"""
===============================================================================
Propósito:
    Reglas de negocio de reservas independientes del transporte HTTP.
API pública:
    ``validate_interval``, ``validate_comment``, ``ensure_bookable``,
    ``find_overlapping`` y ``assert_no_overlap``.
Flujo de datos:
    Servicios → validadores → excepciones de ``bookings.exceptions``.
Decisiones:
    Solo las reservas ``activa`` ocupan agenda; canceladas y finalizadas
    nunca generan conflicto.
===============================================================================
"""

from datetime import datetime

from django.conf import settings
from django.utils import timezone

from .exceptions import ReservationValidationError, ResourceUnavailable, SchedulingConflict
from .intervals import overlapping_q
from .models import Reservation

# Máximo de conflictos devueltos al cliente.
MAX_REPORTED_CONFLICTS = 10


def validate_interval(
    starts_at: datetime | None,
    ends_at: datetime | None,
    *,
    now: datetime | None = None,
    require_future: bool = True,
) -> None:
    errors: dict[str, list[str]] = {}
    if starts_at is None:
        errors["fecha_inicio"] = ["La fecha de inicio es obligatoria."]
    if ends_at is None:
        errors["fecha_fin"] = ["La fecha de término es obligatoria."]
    if not errors:
        if require_future and starts_at <= (now or timezone.now()):
            errors["fecha_inicio"] = ["La fecha de inicio debe ser posterior al momento actual."]
        if ends_at <= starts_at:
            errors["fecha_fin"] = ["La fecha de término debe ser posterior a la fecha de inicio."]
    if errors:
        raise ReservationValidationError(errors=errors)


def validate_comment(comment: str | None) -> None:
    limit = getattr(settings, "RESERVATION_COMMENT_MAX_LENGTH", 500)
    if comment is not None and len(comment) > limit:
        raise ReservationValidationError(
            errors={"comentarios": [f"Los comentarios no pueden superar {limit} caracteres."]}
        )


def ensure_bookable(resource) -> None:
    if resource is None or not resource.is_bookable:
        raise ResourceUnavailable()


def find_overlapping(resource_id, starts_at: datetime, ends_at: datetime, *, exclude_id=None):
    qs = Reservation.objects.filter(resource_id=resource_id, status=Reservation.Status.ACTIVE)
    qs = qs.filter(overlapping_q(starts_at, ends_at))
    if exclude_id is not None:
        qs = qs.exclude(pk=exclude_id)
    return qs.order_by("starts_at", "id")


def assert_no_overlap(resource_id, starts_at: datetime, ends_at: datetime, *, exclude_id=None) -> None:
    conflicts = list(find_overlapping(resource_id, starts_at, ends_at, exclude_id=exclude_id)[:MAX_REPORTED_CONFLICTS])
    if conflicts:
        raise SchedulingConflict(conflicts=conflicts)
