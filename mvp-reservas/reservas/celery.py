"""Aplicación Celery del proyecto y agenda del finalizador automático."""

import os

from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "reservas.settings")

app = Celery("reservas")

app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()

# Se lee del entorno: este módulo se importa antes de que Django cargue settings.
FINALIZER_INTERVAL = float(os.environ.get("RESERVATIONS_FINALIZER_INTERVAL", "60"))

app.conf.beat_schedule = {
    # Reservas activas con fecha de término vencida → finalizadas, cada minuto.
    "finalize-expired-reservations": {
        "task": "bookings.finalize_expired_reservations",
        "schedule": FINALIZER_INTERVAL,
        "options": {"expires": 50},
    },
}
