"""
===============================================================================
Propósito:
    Taxonomía de errores del motor de reservas, expuesta como excepciones DRF
    para que el manejador estándar las traduzca a respuestas JSON.
API pública:
    ``ReservationError`` y sus subclases.
Flujo de datos:
    Servicio → excepción → ``rest_framework.views.exception_handler`` →
    ``{"message": ..., "category": ..., <extras>}`` con el status de la clase.
Decisiones:
    ``detail`` se asigna como dict plano para que los ids y fechas de los
    conflictos conserven su tipo en el JSON.
===============================================================================
"""

from rest_framework import status
from rest_framework.exceptions import APIException

from .intervals import format_instant


class ReservationError(APIException):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_detail = "No se pudo procesar la reserva."
    category = "reservation_error"

    def __init__(self, message=None, **extra):
        message = str(message or self.default_detail)
        super().__init__(message, code=self.category)
        self.message = message
        self.extra = extra
        self.detail = {"message": message, "category": self.category, **extra}

    def __str__(self):
        return self.message


class ReservationValidationError(ReservationError):
    default_detail = "Datos de reserva inválidos."
    category = "validation_error"

    def __init__(self, message=None, errors=None):
        super().__init__(message, errors=errors or {})

    @property
    def errors(self) -> dict:
        return self.extra["errors"]


class ResourceUnavailable(ReservationError):
    default_detail = "El recurso no está disponible para reservas."
    category = "resource_unavailable"


class SchedulingConflict(ReservationError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "El recurso ya está reservado en ese horario."
    category = "scheduling_conflict"

    def __init__(self, message=None, conflicts=()):
        super().__init__(
            message,
            conflicts=[
                {
                    "id": reservation.pk,
                    "fecha_inicio": format_instant(reservation.starts_at),
                    "fecha_fin": format_instant(reservation.ends_at),
                }
                for reservation in conflicts
            ],
        )

    @property
    def conflicts(self) -> list[dict]:
        return self.extra["conflicts"]


class ReservationNotFound(ReservationError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Reserva no encontrada."
    category = "not_found"


class ReservationForbidden(ReservationError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "No tiene permisos para operar sobre esta reserva."
    category = "forbidden"


class ForbiddenFields(ReservationError):
    default_detail = "La solicitud incluye campos que no puede modificar."
    category = "forbidden_fields"

    def __init__(self, invalid_fields, message=None):
        super().__init__(message, invalid_fields=sorted(invalid_fields))

    @property
    def invalid_fields(self) -> list[str]:
        return self.extra["invalid_fields"]


class InvalidState(ReservationError):
    default_detail = "La reserva no admite esta operación en su estado actual."
    category = "invalid_state"

    def __init__(self, message=None, state=None):
        super().__init__(message, estado=state)
