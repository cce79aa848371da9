from rest_framework import serializers

from .models import LifecycleState, Resource, ResourceType


class ResourceTypeSerializer(serializers.ModelSerializer):
    """Serializador para exponer y crear tipos de recurso."""

    nombre = serializers.CharField(source="name", max_length=50)
    descripcion = serializers.CharField(
        source="description", max_length=255, required=False, allow_blank=True, allow_null=True
    )
    estado = serializers.ChoiceField(source="state", choices=LifecycleState.choices, required=False)

    class Meta:
        model = ResourceType
        fields = ["id", "nombre", "descripcion", "estado", "created_at", "updated_at"]
        read_only_fields = ["created_at", "updated_at"]

    def validate_nombre(self, value: str) -> str:
        normalized = (value or "").strip()
        if not normalized:
            raise serializers.ValidationError("El nombre es obligatorio.")
        return normalized


class ResourceSerializer(serializers.ModelSerializer):
    tipo_recurso_id = serializers.PrimaryKeyRelatedField(
        source="resource_type",
        queryset=ResourceType.objects.exclude(state=LifecycleState.DELETED),
    )
    tipo_recurso = serializers.CharField(source="resource_type.name", read_only=True)
    nombre = serializers.CharField(source="name", max_length=100)
    descripcion = serializers.CharField(
        source="description", required=False, allow_blank=True, allow_null=True
    )
    ubicacion = serializers.CharField(
        source="location", max_length=150, required=False, allow_blank=True, allow_null=True
    )
    capacidad = serializers.IntegerField(source="capacity", min_value=1, required=False, allow_null=True)
    disponibilidad_general = serializers.BooleanField(source="is_available", required=False)
    estado = serializers.ChoiceField(source="state", choices=LifecycleState.choices, required=False)

    class Meta:
        model = Resource
        fields = [
            "id",
            "tipo_recurso_id",
            "tipo_recurso",
            "nombre",
            "descripcion",
            "ubicacion",
            "capacidad",
            "disponibilidad_general",
            "estado",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["created_at", "updated_at"]
