"""
===============================================================================
Propósito:
    Exponer el motor de reservas vía Django REST Framework.
API pública:
    ``ReservationViewSet`` registrado como ``reservas`` en
    ``reservas/api_urls.py``.
Flujo de datos:
    Request → serializador de entrada (lista blanca de campos) →
    ``bookings.services`` → ``ReservationSerializer``.
Decisiones:
    Los errores de formato de entrada se informan como
    ``ReservationValidationError`` (422) para mantener un único contrato de
    error con el resto del motor.
===============================================================================
"""

from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from accounts.roles import is_admin

from . import history, services
from .exceptions import ReservationValidationError
from .filters import ReservationFilter
from .intervals import format_instant, overlapping_q
from .models import Reservation
from .serializers import (
    AdminReservationUpdateSerializer,
    OwnerReservationUpdateSerializer,
    ReservationCreateSerializer,
    ReservationHistorySerializer,
    ReservationSerializer,
)
from .states import ensure_mutable


def _validated(serializer):
    if not serializer.is_valid():
        raise ReservationValidationError(errors=serializer.errors)
    return serializer


class ReservationViewSet(mixins.ListModelMixin, viewsets.GenericViewSet):
    """Reservas: el dueño ve las suyas; un administrador ve y filtra todas."""

    serializer_class = ReservationSerializer
    filterset_class = ReservationFilter
    queryset = Reservation.objects.select_related("resource", "user").order_by("-starts_at", "-id")

    def get_queryset(self):
        qs = super().get_queryset()
        if not is_admin(self.request.user):
            qs = qs.filter(user=self.request.user)
        return qs

    def retrieve(self, request, pk=None):
        reservation = services.get_reservation_for(request.user, pk)
        return Response(ReservationSerializer(reservation).data)

    def create(self, request):
        serializer = _validated(ReservationCreateSerializer(data=request.data))
        reservation = services.create_reservation(user=request.user, **serializer.to_service_kwargs())
        return Response(
            {"message": "Reserva creada correctamente", "reserva": ReservationSerializer(reservation).data},
            status=status.HTTP_201_CREATED,
        )

    def update(self, request, pk=None, partial=False):
        reservation = services.get_reservation_for(request.user, pk)
        ensure_mutable(reservation)
        if is_admin(request.user):
            serializer = _validated(AdminReservationUpdateSerializer(data=request.data))
            reservation = services.update_by_admin(
                actor=request.user, reservation_id=reservation.pk, changes=serializer.to_request()
            )
        else:
            serializer = _validated(OwnerReservationUpdateSerializer(data=request.data))
            reservation = services.update_by_owner(
                actor=request.user, reservation_id=reservation.pk, changes=serializer.to_request()
            )
        return Response(
            {"message": "Reserva actualizada correctamente", "reserva": ReservationSerializer(reservation).data}
        )

    def partial_update(self, request, pk=None):
        return self.update(request, pk=pk, partial=True)

    @action(detail=True, methods=["put", "post"], url_path="cancelar")
    def cancel(self, request, pk=None):
        reservation = services.cancel_reservation(actor=request.user, reservation_id=pk)
        return Response(
            {"message": "Reserva cancelada correctamente", "reserva": ReservationSerializer(reservation).data}
        )

    @action(detail=True, methods=["get"], url_path="historial")
    def history(self, request, pk=None):
        reservation = services.get_reservation_for(request.user, pk)
        entries = history.for_reservation(reservation)
        return Response(ReservationHistorySerializer(entries, many=True).data)

    @action(detail=False, methods=["get"], url_path="disponibilidad")
    def availability(self, request):
        """Bloques ocupados (reservas activas) de un recurso, para calendarios."""

        params = request.query_params
        try:
            resource_id = int(params.get("recurso_id", ""))
        except (TypeError, ValueError):
            raise ReservationValidationError(errors={"recurso_id": ["Debe indicar un recurso válido."]})

        window = ReservationFilter(
            data={"desde": params.get("desde"), "hasta": params.get("hasta")},
            queryset=Reservation.objects.none(),
        )
        if not window.is_valid():
            raise ReservationValidationError(errors=window.errors)
        since = window.form.cleaned_data.get("desde")
        until = window.form.cleaned_data.get("hasta")

        qs = Reservation.objects.filter(resource_id=resource_id, status=Reservation.Status.ACTIVE)
        if since and until:
            qs = qs.filter(overlapping_q(since, until))
        elif since:
            qs = qs.filter(ends_at__gt=since)
        elif until:
            qs = qs.filter(starts_at__lt=until)

        show_owner = is_admin(request.user)
        data = [
            {
                "id": r.pk,
                "start": format_instant(r.starts_at),
                "end": format_instant(r.ends_at),
                "estado": r.status,
                "propia": r.user_id == request.user.pk,
                **({"user_id": r.user_id} if show_owner else {}),
            }
            for r in qs.order_by("starts_at", "id")
        ]
        return Response(data)
