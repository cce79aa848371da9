"""
===============================================================================
Propósito:
    Persistir reservas de recursos y su bitácora de cambios.
API pública:
    ``Reservation`` (con ``Reservation.Status``) y ``ReservationHistory`` (con
    ``ReservationHistory.Action``).
Flujo de datos:
    Servicios del motor → ORM → tablas ``reservas`` / ``historial_reservas``.
Dependencias:
    ``catalog.Resource`` y el modelo de usuario configurado.
Decisiones:
    Nunca se borran reservas; el estado cambia a ``cancelada`` o
    ``finalizada``. El historial es de solo inserción.
===============================================================================
"""

from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _


class Reservation(models.Model):
    class Status(models.TextChoices):
        ACTIVE = "activa", _("Activa")
        CANCELLED = "cancelada", _("Cancelada")
        FINALIZED = "finalizada", _("Finalizada")

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="reservations",
    )
    resource = models.ForeignKey(
        "catalog.Resource",
        on_delete=models.PROTECT,
        related_name="reservations",
        db_column="recurso_id",
    )
    starts_at = models.DateTimeField(db_column="fecha_inicio")
    ends_at = models.DateTimeField(db_column="fecha_fin")
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.ACTIVE,
        db_column="estado",
    )
    comment = models.TextField(blank=True, null=True, db_column="comentarios")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "reservas"
        ordering = ["-starts_at"]
        indexes = [
            models.Index(fields=["resource", "status", "starts_at"], name="reserva_recurso_estado_idx"),
            models.Index(fields=["status", "ends_at"], name="reserva_estado_fin_idx"),
        ]

    def __str__(self):
        return f"Reserva #{self.pk} · {self.resource_id} · {self.status}"

    @property
    def is_active(self) -> bool:
        return self.status == self.Status.ACTIVE


class ReservationHistory(models.Model):
    class Action(models.TextChoices):
        CREATED = "creada", _("Creada")
        UPDATED_BY_ADMIN = "actualizada_admin", _("Actualizada por administrador")
        UPDATED_BY_USER = "actualizada_usuario", _("Actualizada por usuario")
        CANCELLED_BY_ADMIN = "cancelada_admin", _("Cancelada por administrador")
        CANCELLED_BY_USER = "cancelada_usuario", _("Cancelada por usuario")
        FINALIZED = "finalizada", _("Finalizada automáticamente")

    reservation = models.ForeignKey(
        Reservation,
        on_delete=models.PROTECT,
        related_name="history",
        db_column="reserva_id",
    )
    # ``None`` cuando la acción la ejecuta el sistema (finalizador).
    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="reservation_history",
        db_column="user_id",
    )
    action = models.CharField(max_length=30, choices=Action.choices, db_column="accion")
    detail = models.TextField(blank=True, null=True, db_column="detalle")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "historial_reservas"
        ordering = ["created_at", "id"]

    def __str__(self):
        return f"{self.reservation_id} · {self.action}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValueError("El historial de reservas no admite modificaciones.")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValueError("El historial de reservas no admite eliminaciones.")
