"""
Exclusión mutua por recurso.

``resource_scope`` serializa la secuencia verificar-solapamiento → escribir de
todas las operaciones que agregan o mueven una reserva activa sobre un mismo
recurso. Dentro del proceso se usa un ``threading.Lock`` por recurso; entre
procesos, el ``SELECT ... FOR UPDATE`` sobre la fila del recurso (efectivo en
PostgreSQL). Los callbacks ``on_commit`` se ejecutan antes de liberar el
candado del proceso.

Solo se registran candados para recursos existentes: un id inventado no hace
crecer el registro.
"""

from __future__ import annotations

import threading
from contextlib import ExitStack, contextmanager

from django.db import transaction

from catalog.services import lock_resources, resource_exists

_registry_lock = threading.Lock()
_resource_locks: dict[int, threading.Lock] = {}


def _lock_for(resource_id: int) -> threading.Lock | None:
    with _registry_lock:
        lock = _resource_locks.get(resource_id)
    if lock is not None:
        return lock
    if not resource_exists(resource_id):
        return None
    with _registry_lock:
        return _resource_locks.setdefault(resource_id, threading.Lock())


@contextmanager
def resource_scope(resource_id, *also_lock):
    """Abre la sección crítica del recurso y entrega su fila bloqueada.

    ``also_lock`` agrega recursos que deben quedar bloqueados en la misma
    sección (p. ej. el recurso de origen al mover una reserva). Los candados se
    toman en orden de id para no generar interbloqueos.

    Entrega ``None`` si el recurso no existe; validarlo queda a cargo de quien
    llama. Cualquier excepción revierte la transacción.
    """

    primary = int(resource_id)
    resource_ids = sorted({primary, *(int(other) for other in also_lock)})
    with ExitStack() as stack:
        for rid in resource_ids:
            lock = _lock_for(rid)
            if lock is not None:
                stack.enter_context(lock)
        with transaction.atomic():
            yield lock_resources(resource_ids).get(primary)
