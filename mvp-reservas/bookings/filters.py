import django_filters

from .models import Reservation


class ReservationFilter(django_filters.FilterSet):
    estado = django_filters.ChoiceFilter(field_name="status", choices=Reservation.Status.choices)
    user_id = django_filters.NumberFilter(field_name="user_id")
    recurso_id = django_filters.NumberFilter(field_name="resource_id")
    desde = django_filters.DateTimeFilter(field_name="starts_at", lookup_expr="gte")
    hasta = django_filters.DateTimeFilter(field_name="ends_at", lookup_expr="lte")

    class Meta:
        model = Reservation
        fields = ["estado", "user_id", "recurso_id", "desde", "hasta"]
