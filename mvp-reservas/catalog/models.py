"""
===============================================================================
Propósito:
    Definir las entidades del catálogo reservable: tipos de recurso y recursos
    (salas, laboratorios, equipos).
API pública:
    Modelos Django ``ResourceType`` y ``Resource`` y la enumeración
    ``LifecycleState``.
Flujo de datos:
    Datos administrados → validaciones de serializador → ORM → consulta del
    motor de reservas (``Resource.is_bookable``).
Dependencias:
    Django ORM.
Decisiones:
    Las tablas y columnas conservan los nombres en español de la base existente
    (``recursos.estado``, ``recursos.disponibilidad_general``). La eliminación es
    lógica: ``estado = 2``.
===============================================================================
"""

from django.db import models
from django.utils.translation import gettext_lazy as _


class LifecycleState(models.IntegerChoices):
    INACTIVE = 0, _("Inactivo")
    ACTIVE = 1, _("Activo")
    DELETED = 2, _("Eliminado")


class ResourceType(models.Model):
    """Clasificación de recursos (ej. sala, laboratorio, proyector)."""

    name = models.CharField(max_length=50, db_column="nombre")
    description = models.CharField(max_length=255, blank=True, null=True, db_column="descripcion")
    state = models.IntegerField(
        choices=LifecycleState.choices,
        default=LifecycleState.ACTIVE,
        db_column="estado",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "tipo_recursos"
        ordering = ["name"]

    def __str__(self):
        return self.name


class Resource(models.Model):
    """Recurso reservable.

    Solo admite reservas nuevas cuando está activo y con la disponibilidad
    general encendida; inactivos y eliminados quedan fuera de agenda.
    """

    resource_type = models.ForeignKey(
        ResourceType,
        on_delete=models.PROTECT,
        related_name="resources",
        db_column="tipo_recurso_id",
    )
    name = models.CharField(max_length=100, db_column="nombre")
    description = models.TextField(blank=True, null=True, db_column="descripcion")
    location = models.CharField(max_length=150, blank=True, null=True, db_column="ubicacion")
    capacity = models.PositiveIntegerField(blank=True, null=True, db_column="capacidad")
    is_available = models.BooleanField(default=True, db_column="disponibilidad_general")
    state = models.IntegerField(
        choices=LifecycleState.choices,
        default=LifecycleState.ACTIVE,
        db_column="estado",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "recursos"
        ordering = ["name"]

    def __str__(self):
        return self.name

    @property
    def is_deleted(self) -> bool:
        return self.state == LifecycleState.DELETED

    @property
    def is_bookable(self) -> bool:
        """``True`` si el recurso acepta reservas nuevas."""

        return self.state == LifecycleState.ACTIVE and self.is_available
