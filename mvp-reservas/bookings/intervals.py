"""Intervalos semiabiertos ``[inicio, fin)`` y su formato en la API."""

from datetime import datetime

from django.db.models import Q
from django.utils import timezone

WIRE_FORMAT = "%Y-%m-%d %H:%M:%S"


def overlaps(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    """``True`` si los intervalos comparten algún instante.

    Reservas consecutivas (``a_end == b_start``) no se solapan.
    """

    return a_start < b_end and a_end > b_start


def overlapping_q(starts_at: datetime, ends_at: datetime, prefix: str = "") -> Q:
    """Misma condición que :func:`overlaps` expresada como filtro ORM."""

    return Q(**{f"{prefix}starts_at__lt": ends_at, f"{prefix}ends_at__gt": starts_at})


def ensure_aware(value: datetime) -> datetime:
    """Interpreta fechas sin zona en la zona horaria del proyecto."""

    if value is not None and timezone.is_naive(value):
        return timezone.make_aware(value)
    return value


def format_instant(value: datetime | None) -> str | None:
    if value is None:
        return None
    return timezone.localtime(value).strftime(WIRE_FORMAT)
