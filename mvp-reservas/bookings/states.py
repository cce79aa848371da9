"""Ciclo de vida de una reserva: ``activa`` → ``cancelada`` | ``finalizada``."""

from .exceptions import InvalidState
from .models import Reservation

Status = Reservation.Status

TRANSITIONS: dict[str, frozenset] = {
    Status.ACTIVE: frozenset({Status.CANCELLED, Status.FINALIZED}),
    Status.CANCELLED: frozenset(),
    Status.FINALIZED: frozenset(),
}

TERMINAL_STATES = frozenset(state for state, targets in TRANSITIONS.items() if not targets)

_MUTATION_MESSAGES = {
    Status.CANCELLED: "No puede modificar una reserva cancelada. Cree una nueva reserva.",
    Status.FINALIZED: "No puede modificar una reserva finalizada.",
}

_CANCEL_MESSAGES = {
    Status.CANCELLED: "La reserva ya está cancelada.",
    Status.FINALIZED: "No se puede cancelar una reserva finalizada.",
}


def is_terminal(state) -> bool:
    return state in TERMINAL_STATES


def can_transition(current, target) -> bool:
    """Mantener ``activa`` es válido; los estados terminales no salen nunca."""

    if current == target:
        return not is_terminal(current)
    return target in TRANSITIONS.get(current, frozenset())


def ensure_mutable(reservation: Reservation) -> None:
    if is_terminal(reservation.status):
        raise InvalidState(_MUTATION_MESSAGES.get(reservation.status), state=reservation.status)


def ensure_transition(current, target) -> None:
    if can_transition(current, target):
        return
    if target == Status.CANCELLED:
        message = _CANCEL_MESSAGES.get(current)
    else:
        message = _MUTATION_MESSAGES.get(current)
    raise InvalidState(message, state=current)
