"""
===============================================================================
Propósito:
    API mínima para exponer información del usuario autenticado.
API pública:
    ``MeView`` con método ``GET`` sobre ``/api/me/``.
Flujo de datos:
    Request autenticada (JWT) → ``MeView.get`` → ``Response`` JSON.
Decisiones:
    Se incluye ``is_admin`` para que los clientes decidan qué acciones mostrar
    sin replicar la regla de roles.
===============================================================================
"""

from rest_framework.views import APIView
from rest_framework.response import Response

from .roles import is_admin


class MeView(APIView):
    """Devuelve datos básicos del usuario autenticado utilizando autenticación DRF."""

    def get(self, request):
        u = request.user
        groups = list(u.groups.values_list("name", flat=True))
        return Response(
            {
                "id": u.id,
                "username": u.username,
                "email": u.email,
                "groups": groups,
                "is_admin": is_admin(u),
            }
        )
