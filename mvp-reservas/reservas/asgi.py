"""
- Propósito del módulo: exponer el callable ASGI del proyecto ``reservas``
  para servidores asincrónicos (Daphne, Uvicorn).
- API pública: variable ``application`` compatible con ASGI.
"""

import os

from django.core.asgi import get_asgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'reservas.settings')

application = get_asgi_application()
