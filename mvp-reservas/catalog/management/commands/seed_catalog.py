from django.core.management.base import BaseCommand

from catalog.models import LifecycleState, ResourceType

DEFAULT_TYPES = (
    ("Sala", "Salas de reuniones y estudio"),
    ("Laboratorio", "Laboratorios con equipamiento especializado"),
    ("Equipo", "Equipos portátiles: proyectores, notebooks, cámaras"),
)


class Command(BaseCommand):
    help = "Crea tipos de recurso por defecto"

    def handle(self, *args, **kwargs):
        created = 0
        for name, description in DEFAULT_TYPES:
            _, was_created = ResourceType.objects.get_or_create(
                name=name,
                defaults={"description": description, "state": LifecycleState.ACTIVE},
            )
            created += int(was_created)
        self.stdout.write(self.style.SUCCESS(f"Tipos de recurso listos ({created} nuevos)"))
