import logging
import time

from django.core.management.base import BaseCommand

from bookings.services import finalize_expired_reservations


logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = "Finaliza las reservas activas cuya fecha de término ya pasó."

    def add_arguments(self, parser):
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Cuenta las reservas vencidas sin modificarlas ni enviar notificaciones.",
        )

    def handle(self, *args, **options):
        dry_run = options.get("dry_run", False)

        start = time.perf_counter()
        metrics = finalize_expired_reservations(dry_run=dry_run)
        duration = round(time.perf_counter() - start, 4)

        logger.info(
            "Finalización de reservas ejecutada",
            extra={"metrics": {**metrics, "duration_seconds": duration, "dry_run": dry_run}},
        )

        if dry_run:
            self.stdout.write(self.style.SUCCESS(f"SIMULACIÓN: {metrics['candidates']} reservas vencidas."))
        else:
            self.stdout.write(
                self.style.SUCCESS(
                    f"EJECUCIÓN: {metrics['finalized']} finalizadas, {metrics['failed']} con error."
                )
            )
        self.stdout.write(f"Duración (s): {duration}")
