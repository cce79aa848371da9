from datetime import timedelta

from django.contrib.auth import get_user_model
from django.contrib.auth.models import Group
from django.utils import timezone

from accounts.roles import ROLE_ADMIN
from catalog.models import LifecycleState, Resource, ResourceType

User = get_user_model()


def make_user(username, **extra):
    return User.objects.create_user(username=username, password="pass", **extra)


def make_admin(username="admin"):
    group, _ = Group.objects.get_or_create(name=ROLE_ADMIN)
    user = make_user(username)
    user.groups.add(group)
    return user


def make_resource(name="Sala 1", state=LifecycleState.ACTIVE, is_available=True):
    resource_type, _ = ResourceType.objects.get_or_create(name="Sala")
    return Resource.objects.create(
        resource_type=resource_type,
        name=name,
        location="Edificio A",
        capacity=8,
        is_available=is_available,
        state=state,
    )


def slot(days=7, hour=10, hours=1):
    """Intervalo ``[hour, hour + hours)`` en hora local, ``days`` días en el futuro."""

    start = (timezone.localtime() + timedelta(days=days)).replace(hour=hour, minute=0, second=0, microsecond=0)
    return start, start + timedelta(hours=hours)


def wire(value):
    return timezone.localtime(value).strftime("%Y-%m-%d %H:%M:%S")
