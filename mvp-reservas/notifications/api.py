"""Bandeja de notificaciones del usuario autenticado."""

from rest_framework import mixins, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from . import services
from .models import Notification
from .serializers import NotificationSerializer

_TRUTHY = {"1", "true", "yes", "on", "si", "sí"}


class NotificationViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """Cada usuario ve y marca solo sus propias notificaciones."""

    serializer_class = NotificationSerializer

    def get_queryset(self):
        qs = Notification.objects.filter(user=self.request.user).order_by("-created_at", "-id")
        only_unread = (self.request.query_params.get("solo_no_leidas") or "").strip().lower()
        if self.action == "list" and only_unread in _TRUTHY:
            qs = qs.filter(is_read=False)
        return qs

    @action(detail=True, methods=["put", "post"], url_path="leer")
    def mark_read(self, request, pk=None):
        notification = services.mark_read(self.get_object())
        return Response(
            {
                "message": "Notificación marcada como leída",
                "notificacion": NotificationSerializer(notification).data,
            }
        )

    @action(detail=False, methods=["put", "post"], url_path="marcar-todas-leidas")
    def mark_all_read(self, request):
        updated = services.mark_all_read(request.user)
        return Response(
            {"message": "Todas las notificaciones han sido marcadas como leídas", "actualizadas": updated}
        )
