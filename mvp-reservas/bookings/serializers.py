from rest_framework import serializers

from .exceptions import ForbiddenFields
from .models import Reservation, ReservationHistory
from .services import AdminUpdate, OwnerUpdate


class ReservationSerializer(serializers.ModelSerializer):
    """Representación pública de una reserva (solo lectura)."""

    recurso_id = serializers.IntegerField(source="resource_id", read_only=True)
    recurso = serializers.CharField(source="resource.name", read_only=True)
    usuario = serializers.CharField(source="user.username", read_only=True)
    fecha_inicio = serializers.DateTimeField(source="starts_at", read_only=True)
    fecha_fin = serializers.DateTimeField(source="ends_at", read_only=True)
    estado = serializers.CharField(source="status", read_only=True)
    comentarios = serializers.CharField(source="comment", read_only=True, allow_null=True)

    class Meta:
        model = Reservation
        fields = [
            "id",
            "user_id",
            "usuario",
            "recurso_id",
            "recurso",
            "fecha_inicio",
            "fecha_fin",
            "estado",
            "comentarios",
            "created_at",
            "updated_at",
        ]


class ReservationCreateSerializer(serializers.Serializer):
    # Existencia y disponibilidad del recurso las decide el motor (ResourceUnavailable).
    recurso_id = serializers.IntegerField()
    fecha_inicio = serializers.DateTimeField()
    fecha_fin = serializers.DateTimeField()
    comentarios = serializers.CharField(required=False, allow_null=True, allow_blank=True, trim_whitespace=False)

    def to_service_kwargs(self) -> dict:
        data = self.validated_data
        return {
            "resource_id": data["recurso_id"],
            "starts_at": data["fecha_inicio"],
            "ends_at": data["fecha_fin"],
            "comment": data.get("comentarios"),
        }


class AllowListSerializer(serializers.Serializer):
    """Rechaza con ``ForbiddenFields`` cualquier clave fuera de ``allowed_fields``."""

    allowed_fields: tuple[str, ...] = ()
    forbidden_message = "La solicitud incluye campos que no puede modificar."

    def to_internal_value(self, data):
        if hasattr(data, "keys"):
            keys = set(data.keys())
            if "user_id" in keys:
                raise ForbiddenFields(["user_id"], message="No puede cambiar el usuario de una reserva existente.")
            extra = keys.difference(self.allowed_fields)
            if extra:
                raise ForbiddenFields(extra, message=self.forbidden_message)
        return super().to_internal_value(data)


class OwnerReservationUpdateSerializer(AllowListSerializer):
    allowed_fields = ("fecha_inicio", "fecha_fin", "comentarios")
    forbidden_message = "Solo puede modificar fecha_inicio, fecha_fin y comentarios."

    fecha_inicio = serializers.DateTimeField()
    fecha_fin = serializers.DateTimeField()
    comentarios = serializers.CharField(required=False, allow_null=True, allow_blank=True, trim_whitespace=False)

    def to_request(self) -> OwnerUpdate:
        data = self.validated_data
        return OwnerUpdate(
            starts_at=data["fecha_inicio"],
            ends_at=data["fecha_fin"],
            comment=data.get("comentarios"),
        )


class AdminReservationUpdateSerializer(AllowListSerializer):
    allowed_fields = ("recurso_id", "fecha_inicio", "fecha_fin", "estado", "comentarios")
    forbidden_message = "Solo puede modificar recurso_id, fecha_inicio, fecha_fin, estado y comentarios."

    recurso_id = serializers.IntegerField(required=False)
    fecha_inicio = serializers.DateTimeField(required=False)
    fecha_fin = serializers.DateTimeField(required=False)
    # ``finalizada`` solo la asigna el finalizador automático.
    estado = serializers.ChoiceField(
        required=False,
        choices=[Reservation.Status.ACTIVE, Reservation.Status.CANCELLED],
    )
    comentarios = serializers.CharField(required=False, allow_null=True, allow_blank=True, trim_whitespace=False)

    def to_request(self) -> AdminUpdate:
        data = self.validated_data
        return AdminUpdate(
            resource_id=data.get("recurso_id"),
            starts_at=data.get("fecha_inicio"),
            ends_at=data.get("fecha_fin"),
            status=data.get("estado"),
            comment=data.get("comentarios"),
        )


class ReservationHistorySerializer(serializers.ModelSerializer):
    reserva_id = serializers.IntegerField(source="reservation_id", read_only=True)
    user_id = serializers.IntegerField(source="actor_id", read_only=True, allow_null=True)
    usuario = serializers.SerializerMethodField()
    accion = serializers.CharField(source="action", read_only=True)
    detalle = serializers.CharField(source="detail", read_only=True, allow_null=True)

    class Meta:
        model = ReservationHistory
        fields = ["id", "reserva_id", "user_id", "usuario", "accion", "detalle", "created_at"]

    def get_usuario(self, obj):
        return obj.actor.get_username() if obj.actor_id else None
