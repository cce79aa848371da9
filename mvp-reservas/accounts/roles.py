"""
===============================================================================
Propósito:
    Centralizar constantes y helpers para identificar roles de usuario.
API pública:
    Constantes ``ROLE_ADMIN`` y ``ROLE_USER`` y funciones ``is_admin`` y
    ``admin_user_ids``.
Flujo de datos:
    Usuario Django → consultas a ``user.groups`` → booleano según pertenencia al
    grupo correspondiente.
Dependencias:
    Modelo de usuario configurado y grupos definidos en base de datos
    (``manage.py init_roles``).
Decisiones:
    ``admin_user_ids`` consulta la base en cada llamada; el motor de reservas
    la invoca por operación para difundir notificaciones sin estado global.
===============================================================================
"""

from django.contrib.auth import get_user_model
from django.db.models import Q

ROLE_ADMIN = "ADMINISTRADOR"
ROLE_USER = "USUARIO"


def is_admin(user):
    """Devuelve ``True`` si el usuario es superusuario o pertenece al grupo administrador."""

    if user is None or not getattr(user, "is_authenticated", False):
        return False
    return user.is_superuser or user.groups.filter(name=ROLE_ADMIN).exists()


def admin_user_ids() -> set[int]:
    """Identificadores de los administradores activos al momento de la consulta."""

    User = get_user_model()
    return set(
        User.objects.filter(is_active=True)
        .filter(Q(is_superuser=True) | Q(groups__name=ROLE_ADMIN))
        .values_list("id", flat=True)
        .distinct()
    )
