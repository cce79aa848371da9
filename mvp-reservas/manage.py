#!/usr/bin/env python
"""
- Propósito del módulo: exponer punto de entrada CLI para gestionar el proyecto
  ``reservas`` (migraciones, runserver, ``finalize_reservations``).
- Riesgos, supuestos, límites: requiere que el entorno virtual tenga Django y
  que ``DJANGO_SETTINGS_MODULE`` apunte a ``reservas.settings``.
"""
import os
import sys


def main():
    """Ejecuta tareas administrativas de Django."""
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'reservas.settings')
    try:
        from django.core.management import execute_from_command_line
    except ImportError as exc:
        raise ImportError(
            "Couldn't import Django. Are you sure it's installed and "
            "available on your PYTHONPATH environment variable? Did you "
            "forget to activate a virtual environment?"
        ) from exc
    execute_from_command_line(sys.argv)


if __name__ == '__main__':
    main()
