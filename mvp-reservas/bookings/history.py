from .models import ReservationHistory


def append(reservation, actor, action, detail: str | None = None) -> ReservationHistory:
    """Agrega una entrada al historial. ``actor=None`` identifica al sistema."""

    return ReservationHistory.objects.create(
        reservation=reservation,
        actor=actor,
        action=action,
        detail=detail,
    )


def for_reservation(reservation):
    return reservation.history.select_related("actor").order_by("created_at", "id")
