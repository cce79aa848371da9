from django.contrib import admin

from .models import Reservation, ReservationHistory


class ReadOnlyAdmin(admin.ModelAdmin):
    """Las reservas solo cambian a través del motor, que valida solapes y registra historial."""

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


class ReservationHistoryInline(admin.TabularInline):
    model = ReservationHistory
    extra = 0
    fields = ("created_at", "actor", "action", "detail")
    readonly_fields = fields
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Reservation)
class ReservationAdmin(ReadOnlyAdmin):
    list_display = ("id", "resource", "user", "starts_at", "ends_at", "status")
    list_filter = ("status", "resource")
    search_fields = ("resource__name", "user__username", "comment")
    date_hierarchy = "starts_at"
    inlines = [ReservationHistoryInline]


@admin.register(ReservationHistory)
class ReservationHistoryAdmin(ReadOnlyAdmin):
    list_display = ("created_at", "reservation", "actor", "action", "detail")
    list_filter = ("action",)
    search_fields = ("detail", "actor__username")
