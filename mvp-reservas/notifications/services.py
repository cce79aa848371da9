"""
===============================================================================
Propósito:
    Entregar avisos a la bandeja de los usuarios y gestionar su lectura.
API pública:
    ``send``, ``mark_read``, ``mark_all_read`` y las categorías ``CATEGORY_*``.
Flujo de datos:
    Motor de reservas (callbacks ``on_commit``) → ``send`` → ``bulk_create``.
Decisiones:
    ``send`` no atrapa errores; los reintentos y el registro de fallas quedan
    en el motor, que ya confirmó la operación principal.
===============================================================================
"""

from __future__ import annotations

import logging
from typing import Iterable

from .models import Notification

logger = logging.getLogger(__name__)

CATEGORY_RESERVATION_CREATED = "reserva_creada"
CATEGORY_RESERVATION_UPDATED = "reserva_actualizada"
CATEGORY_RESERVATION_CANCELLED = "reserva_cancelada"
CATEGORY_RESERVATION_FINALIZED = "reserva_finalizada"

TITLE_MAX_LENGTH = Notification._meta.get_field("title").max_length


def send(user_ids: Iterable[int], category: str, title: str, body: str) -> list[Notification]:
    """Crea una notificación no leída por destinatario (ids duplicados se ignoran)."""

    recipients = list(dict.fromkeys(uid for uid in user_ids if uid is not None))
    if not recipients:
        return []
    created = Notification.objects.bulk_create(
        [
            Notification(user_id=uid, category=category, title=title[:TITLE_MAX_LENGTH], body=body)
            for uid in recipients
        ]
    )
    logger.info(
        "Notificaciones enviadas",
        extra={"category": category, "recipients": len(recipients)},
    )
    return created


def mark_read(notification: Notification) -> Notification:
    if not notification.is_read:
        notification.is_read = True
        notification.save(update_fields=["is_read"])
    return notification


def mark_all_read(user) -> int:
    return Notification.objects.filter(user=user, is_read=False).update(is_read=True)
