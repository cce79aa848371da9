"""
===============================================================================
Propósito:
    Motor de reservas: crear, modificar (dueño / administrador), cancelar y
    finalizar reservas sin permitir dos reservas activas solapadas sobre un
    mismo recurso.
API pública:
    ``create_reservation``, ``update_by_owner``, ``update_by_admin``,
    ``cancel_reservation``, ``finalize_reservation``,
    ``finalize_expired_reservations``, ``get_reservation_for`` y los
    contenedores ``OwnerUpdate`` / ``AdminUpdate``.
Flujo de datos:
    API / tarea Celery → validaciones → ``resource_scope`` (candado del
    recurso + transacción) → verificación de solapes → escritura →
    ``on_commit``: historial y notificaciones.
Dependencias:
    ``catalog`` (recursos), ``accounts.roles`` (administradores),
    ``notifications.services`` (bandeja).
Decisiones:
    Historial y notificaciones se registran tras el commit y dentro del
    candado: su falla no revierte la reserva, se reintenta
    ``RESERVATIONS_SIDE_EFFECT_ATTEMPTS`` veces y luego se registra en el log.
    Cancelar y finalizar nunca agregan ocupación, por eso no toman el candado
    del recurso; basta el bloqueo de la fila de la reserva y una actualización
    condicionada al estado ``activa``.
===============================================================================
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from functools import partial

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from accounts.roles import admin_user_ids, is_admin
from notifications import services as notifications

from . import history
from .exceptions import InvalidState, ReservationForbidden, ReservationNotFound, ResourceUnavailable, SchedulingConflict
from .intervals import ensure_aware, format_instant
from .locks import resource_scope
from .models import Reservation, ReservationHistory
from .states import ensure_mutable, ensure_transition
from .validators import assert_no_overlap, ensure_bookable, validate_comment, validate_interval

logger = logging.getLogger(__name__)

Status = Reservation.Status
Action = ReservationHistory.Action

SCOPE_ATTEMPTS = 3


@dataclass
class OwnerUpdate:
    """Cambios permitidos al dueño: horario completo y, opcionalmente, comentario."""

    starts_at: datetime
    ends_at: datetime
    comment: str | None = None


@dataclass
class AdminUpdate:
    """Cambios de administrador; ``None`` conserva el valor actual."""

    resource_id: int | None = None
    starts_at: datetime | None = None
    ends_at: datetime | None = None
    status: str | None = None
    comment: str | None = None


# ---------------------------------------------------------------------------
# Efectos secundarios post-commit
# ---------------------------------------------------------------------------


def _run_side_effect(label: str, reservation_id, func, *args, **kwargs) -> bool:
    attempts = max(int(getattr(settings, "RESERVATIONS_SIDE_EFFECT_ATTEMPTS", 3)), 1)
    for attempt in range(1, attempts + 1):
        try:
            func(*args, **kwargs)
            return True
        except Exception:
            if attempt == attempts:
                logger.exception(
                    "Efecto secundario '%s' falló tras %s intentos",
                    label,
                    attempts,
                    extra={"reservation_id": reservation_id, "side_effect": label},
                )
                return False
            logger.warning(
                "Reintentando efecto secundario '%s' (intento %s de %s)",
                label,
                attempt,
                attempts,
                extra={"reservation_id": reservation_id, "side_effect": label},
            )
    return False


def _after_commit(label: str, reservation_id, func, *args, **kwargs) -> None:
    transaction.on_commit(partial(_run_side_effect, label, reservation_id, func, *args, **kwargs))


def _display_name(user) -> str:
    if user is None:
        return "Sistema"
    return user.get_full_name() or user.get_username()


def _window(reservation: Reservation) -> str:
    return f"{format_instant(reservation.starts_at)} al {format_instant(reservation.ends_at)}"


def _record(reservation: Reservation, actor, action, detail: str) -> None:
    _after_commit(f"historial:{action}", reservation.pk, history.append, reservation, actor, action, detail)


def _notify(reservation: Reservation, user_ids, category: str, title: str, body: str) -> None:
    _after_commit(f"notificacion:{category}", reservation.pk, notifications.send, list(user_ids), category, title, body)


# ---------------------------------------------------------------------------
# Lectura con control de acceso
# ---------------------------------------------------------------------------


def get_reservation_for(actor, reservation_id) -> Reservation:
    """Reserva visible para ``actor``: su dueño o un administrador.

    Lanza ``ReservationNotFound`` (404) antes que ``ReservationForbidden`` (403).
    """

    try:
        reservation_id = int(reservation_id)
    except (TypeError, ValueError):
        raise ReservationNotFound()
    reservation = Reservation.objects.select_related("resource", "user").filter(pk=reservation_id).first()
    if reservation is None:
        raise ReservationNotFound()
    if reservation.user_id != getattr(actor, "pk", None) and not is_admin(actor):
        raise ReservationForbidden()
    return reservation


def _lock_reservation(reservation_id) -> Reservation:
    reservation = Reservation.objects.select_for_update().filter(pk=reservation_id).first()
    if reservation is None:
        raise ReservationNotFound()
    return reservation


@contextmanager
def _reservation_scope(reservation_id, target_resource_id=None):
    """Sección crítica del recurso en que está la reserva, con su fila bloqueada.

    Con ``target_resource_id`` se bloquean ambos recursos (origen y destino) y
    se entrega el de destino. Si la reserva cambió de recurso entre la lectura
    y el bloqueo, se sale de la sección y se vuelve a intentar con el recurso
    nuevo.
    """

    for _ in range(SCOPE_ATTEMPTS):
        current = Reservation.objects.filter(pk=reservation_id).values_list("resource_id", flat=True).first()
        if current is None:
            raise ReservationNotFound()
        target = current if target_resource_id is None else target_resource_id
        with resource_scope(target, current) as resource:
            reservation = _lock_reservation(reservation_id)
            if reservation.resource_id == current:
                yield resource, reservation
                return
        logger.info(
            "La reserva cambió de recurso antes del bloqueo; reintentando",
            extra={"reservation_id": reservation_id, "resource_id": current},
        )
    raise SchedulingConflict("La reserva fue modificada por otra operación. Intente nuevamente.")


# ---------------------------------------------------------------------------
# Operaciones del motor
# ---------------------------------------------------------------------------


def create_reservation(
    *,
    user,
    resource_id,
    starts_at: datetime,
    ends_at: datetime,
    comment: str | None = None,
    now: datetime | None = None,
) -> Reservation:
    starts_at, ends_at = ensure_aware(starts_at), ensure_aware(ends_at)
    validate_interval(starts_at, ends_at, now=now, require_future=True)
    validate_comment(comment)

    with resource_scope(resource_id) as resource:
        ensure_bookable(resource)
        assert_no_overlap(resource.pk, starts_at, ends_at)
        reservation = Reservation.objects.create(
            user=user,
            resource=resource,
            starts_at=starts_at,
            ends_at=ends_at,
            comment=comment,
            status=Status.ACTIVE,
        )

        _record(reservation, user, Action.CREATED, "Reserva creada por el usuario")
        _notify(
            reservation,
            [user.pk],
            notifications.CATEGORY_RESERVATION_CREATED,
            "Reserva creada correctamente",
            f"Has reservado el recurso {resource.name} del {_window(reservation)}.",
        )
        _notify(
            reservation,
            admin_user_ids(),
            notifications.CATEGORY_RESERVATION_CREATED,
            "Nueva reserva creada",
            f"El usuario {_display_name(user)} ha reservado el recurso {resource.name} del {_window(reservation)}.",
        )

    logger.info(
        "Reserva creada",
        extra={"reservation_id": reservation.pk, "resource_id": resource.pk, "user_id": user.pk},
    )
    return reservation


def update_by_owner(*, actor, reservation_id, changes: OwnerUpdate, now: datetime | None = None) -> Reservation:
    reservation = get_reservation_for(actor, reservation_id)
    if reservation.user_id != actor.pk:
        raise ReservationForbidden("Solo el dueño puede modificar esta reserva.")
    ensure_mutable(reservation)

    starts_at, ends_at = ensure_aware(changes.starts_at), ensure_aware(changes.ends_at)
    validate_interval(starts_at, ends_at, now=now, require_future=True)
    validate_comment(changes.comment)

    with _reservation_scope(reservation.pk) as (resource, reservation):
        ensure_mutable(reservation)
        ensure_bookable(resource)
        assert_no_overlap(resource.pk, starts_at, ends_at, exclude_id=reservation.pk)

        reservation.starts_at = starts_at
        reservation.ends_at = ends_at
        if changes.comment is not None:
            reservation.comment = changes.comment
        reservation.save(update_fields=["starts_at", "ends_at", "comment", "updated_at"])

        _record(
            reservation,
            actor,
            Action.UPDATED_BY_USER,
            f"Reserva actualizada por el usuario. Nuevas fechas: {_window(reservation)}",
        )
        _notify(
            reservation,
            admin_user_ids(),
            notifications.CATEGORY_RESERVATION_UPDATED,
            "Reserva modificada por el usuario",
            f"El usuario {_display_name(actor)} ha modificado su reserva del recurso "
            f"{resource.name} al {_window(reservation)}.",
        )

    logger.info(
        "Reserva actualizada por su dueño",
        extra={"reservation_id": reservation.pk, "user_id": actor.pk},
    )
    return reservation


def update_by_admin(*, actor, reservation_id, changes: AdminUpdate) -> Reservation:
    if not is_admin(actor):
        raise ReservationForbidden("Solo un administrador puede realizar esta modificación.")
    reservation = get_reservation_for(actor, reservation_id)
    ensure_mutable(reservation)
    if changes.status == Status.FINALIZED:
        raise InvalidState("Solo el sistema puede finalizar reservas.", state=reservation.status)
    validate_comment(changes.comment)

    # Los valores no enviados se toman de la fila bloqueada, no de la lectura previa.
    with _reservation_scope(reservation.pk, changes.resource_id) as (resource, reservation):
        ensure_mutable(reservation)
        target_status = changes.status or reservation.status
        ensure_transition(reservation.status, target_status)
        if resource is None:
            raise ResourceUnavailable()
        starts_at = ensure_aware(changes.starts_at) if changes.starts_at is not None else reservation.starts_at
        ends_at = ensure_aware(changes.ends_at) if changes.ends_at is not None else reservation.ends_at
        validate_interval(starts_at, ends_at, require_future=False)
        if target_status == Status.ACTIVE:
            ensure_bookable(resource)
            assert_no_overlap(resource.pk, starts_at, ends_at, exclude_id=reservation.pk)

        reservation.resource = resource
        reservation.starts_at = starts_at
        reservation.ends_at = ends_at
        reservation.status = target_status
        if changes.comment is not None:
            reservation.comment = changes.comment
        reservation.save(
            update_fields=["resource", "starts_at", "ends_at", "status", "comment", "updated_at"]
        )

        _record(
            reservation,
            actor,
            Action.UPDATED_BY_ADMIN,
            f"Reserva actualizada por administrador. Estado: {reservation.status}. "
            f"Recurso: {resource.name}. Fechas: {_window(reservation)}",
        )
        if reservation.user_id != actor.pk:
            _notify(
                reservation,
                [reservation.user_id],
                notifications.CATEGORY_RESERVATION_UPDATED,
                "Tu reserva ha sido modificada por un administrador",
                f"Tu reserva del recurso {resource.name} ahora es del {_window(reservation)} "
                f"con estado {reservation.status}.",
            )

    logger.info(
        "Reserva actualizada por administrador",
        extra={"reservation_id": reservation.pk, "user_id": actor.pk, "status": reservation.status},
    )
    return reservation


def cancel_reservation(*, actor, reservation_id) -> Reservation:
    reservation = get_reservation_for(actor, reservation_id)
    ensure_transition(reservation.status, Status.CANCELLED)
    acting_as_admin = is_admin(actor)

    with transaction.atomic():
        reservation = _lock_reservation(reservation.pk)
        ensure_transition(reservation.status, Status.CANCELLED)
        changed_at = timezone.now()
        updated = Reservation.objects.filter(pk=reservation.pk, status=Status.ACTIVE).update(
            status=Status.CANCELLED, updated_at=changed_at
        )
        if not updated:
            reservation.refresh_from_db(fields=["status"])
            ensure_transition(reservation.status, Status.CANCELLED)
        reservation.status = Status.CANCELLED
        reservation.updated_at = changed_at
        resource = reservation.resource

        if acting_as_admin:
            _record(reservation, actor, Action.CANCELLED_BY_ADMIN, "Reserva cancelada por administrador")
        else:
            _record(reservation, actor, Action.CANCELLED_BY_USER, "Reserva cancelada por el usuario")

        if reservation.user_id != actor.pk:
            _notify(
                reservation,
                [reservation.user_id],
                notifications.CATEGORY_RESERVATION_CANCELLED,
                "Tu reserva ha sido cancelada por un administrador",
                f"Tu reserva del recurso {resource.name} del {_window(reservation)} fue cancelada.",
            )
        else:
            _notify(
                reservation,
                admin_user_ids(),
                notifications.CATEGORY_RESERVATION_CANCELLED,
                "Reserva cancelada por el usuario",
                f"El usuario {_display_name(actor)} ha cancelado su reserva del recurso "
                f"{resource.name} del {_window(reservation)}.",
            )

    logger.info(
        "Reserva cancelada",
        extra={"reservation_id": reservation.pk, "user_id": actor.pk, "by_admin": acting_as_admin},
    )
    return reservation


# ---------------------------------------------------------------------------
# Finalizador
# ---------------------------------------------------------------------------


def finalize_reservation(reservation_id, *, now: datetime | None = None, admin_ids=None) -> bool:
    """Finaliza una reserva activa vencida. Devuelve ``False`` si ya no aplica."""

    now = now or timezone.now()
    with transaction.atomic():
        reservation = Reservation.objects.select_for_update().filter(pk=reservation_id).first()
        if reservation is None or reservation.status != Status.ACTIVE or reservation.ends_at >= now:
            return False
        updated = Reservation.objects.filter(pk=reservation.pk, status=Status.ACTIVE).update(
            status=Status.FINALIZED, updated_at=now
        )
        if not updated:
            return False
        reservation.status = Status.FINALIZED
        resource = reservation.resource

        _record(
            reservation,
            None,
            Action.FINALIZED,
            f"Reserva finalizada automáticamente por el sistema. Término: {format_instant(reservation.ends_at)}",
        )
        _notify(
            reservation,
            [reservation.user_id],
            notifications.CATEGORY_RESERVATION_FINALIZED,
            "Reserva finalizada",
            f"Tu reserva del recurso {resource.name} del {_window(reservation)} ha finalizado.",
        )
        _notify(
            reservation,
            admin_ids if admin_ids is not None else admin_user_ids(),
            notifications.CATEGORY_RESERVATION_FINALIZED,
            "Reserva finalizada automáticamente",
            f"La reserva #{reservation.pk} del recurso {resource.name} del {_window(reservation)} "
            "fue finalizada por el sistema.",
        )
    return True


def finalize_expired_reservations(*, now: datetime | None = None, dry_run: bool = False) -> dict[str, int]:
    """Finaliza todas las reservas activas cuya fecha de término ya pasó.

    Cada reserva se procesa en su propia transacción; una falla se registra y
    no detiene al resto.
    """

    now = now or timezone.now()
    candidates = list(
        Reservation.objects.filter(status=Status.ACTIVE, ends_at__lt=now)
        .order_by("ends_at", "id")
        .values_list("pk", flat=True)
    )
    metrics = {"candidates": len(candidates), "finalized": 0, "skipped": 0, "failed": 0}
    if dry_run or not candidates:
        return metrics

    admin_ids = admin_user_ids()
    for reservation_id in candidates:
        try:
            if finalize_reservation(reservation_id, now=now, admin_ids=admin_ids):
                metrics["finalized"] += 1
            else:
                metrics["skipped"] += 1
        except Exception:
            metrics["failed"] += 1
            logger.exception(
                "No se pudo finalizar la reserva %s",
                reservation_id,
                extra={"reservation_id": reservation_id},
            )

    logger.info("Finalizador de reservas ejecutado", extra={"metrics": metrics})
    return metrics
