"""Tareas Celery del motor de reservas."""

import logging

from celery import shared_task

from .services import finalize_expired_reservations

logger = logging.getLogger(__name__)


@shared_task(name="bookings.finalize_expired_reservations")
def finalize_expired_reservations_task() -> dict[str, int]:
    """Programada por beat cada ``RESERVATIONS_FINALIZER_INTERVAL`` segundos (ver ``reservas/celery.py``)."""

    metrics = finalize_expired_reservations()
    if metrics["failed"]:
        logger.warning("Finalizador con fallas", extra={"metrics": metrics})
    return metrics
