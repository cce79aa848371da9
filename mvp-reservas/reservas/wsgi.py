"""
- Propósito del módulo: publicar el callable WSGI de ``reservas`` para
  servidores sincrónicos (Gunicorn, mod_wsgi).
- API pública: variable ``application`` conforme a la especificación WSGI.
- Riesgos, supuestos, límites: con varios workers el bloqueo por recurso
  depende de ``select_for_update``; usar una base con bloqueo de filas.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'reservas.settings')

application = get_wsgi_application()
