from rest_framework import serializers

from .models import Notification


class NotificationSerializer(serializers.ModelSerializer):
    tipo = serializers.CharField(source="category", read_only=True)
    titulo = serializers.CharField(source="title", read_only=True)
    mensaje = serializers.CharField(source="body", read_only=True)
    leida = serializers.BooleanField(source="is_read", read_only=True)

    class Meta:
        model = Notification
        fields = ["id", "user_id", "tipo", "titulo", "mensaje", "leida", "created_at"]
