# accounts/management/commands/init_roles.py
from django.core.management.base import BaseCommand
from django.contrib.auth.models import Group, Permission

from accounts.roles import ROLE_ADMIN, ROLE_USER


class Command(BaseCommand):
    help = "Inicializa los grupos de roles y asigna permisos por defecto"

    def handle(self, *args, **kwargs):
        admin, _ = Group.objects.get_or_create(name=ROLE_ADMIN)
        user, _ = Group.objects.get_or_create(name=ROLE_USER)

        app_labels = ("catalog", "bookings", "notifications")
        admin.permissions.set(Permission.objects.filter(content_type__app_label__in=app_labels))
        user.permissions.set(
            Permission.objects.filter(
                content_type__app_label__in=app_labels,
                codename__in=["view_resource", "view_resourcetype", "add_reservation", "view_reservation"],
            )
        )
        self.stdout.write(self.style.SUCCESS("Roles inicializados"))
