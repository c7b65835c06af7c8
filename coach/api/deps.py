"""Shared FastAPI dependencies: the configured entry store and a mutator bound to it.

Tests replace ``get_store`` through ``app.dependency_overrides``.
"""
import logging
from typing import Optional

from fastapi import Depends

from coach.domain.errors import ValidationError
from coach.infra.Entry_Store import EntryStore
from coach.infra.Json_Store import JsonEntryStore
from coach.infra.Memory_Store import InMemoryEntryStore
from coach.infra.Rest_Store import RestEntryStore
from coach.logic.planner.mutator import EntryMutator
from coach.utilities import config

logger = logging.getLogger(__name__)

_store: Optional[EntryStore] = None


def build_store(backend: str = None) -> EntryStore:
    backend = (backend or config.STORAGE_BACKEND).lower()
    if backend == 'memory':
        return InMemoryEntryStore()
    if backend == 'json':
        return JsonEntryStore(config.DATA_DIR)
    if backend == 'rest':
        if not config.BACKEND_URL:
            raise ValidationError("BACKEND_URL must be set for the rest storage backend")
        return RestEntryStore(config.BACKEND_URL, config.BACKEND_API_KEY, config.BACKEND_TIMEOUT)
    raise ValidationError(f"Unknown storage backend '{backend}'")


def get_store() -> EntryStore:
    global _store
    if _store is None:
        _store = build_store()
        logger.info("Using %s", type(_store).__name__)
    return _store


async def close_store():
    global _store
    if _store is not None:
        await _store.aclose()
        _store = None


def get_mutator(store: EntryStore = Depends(get_store)) -> EntryMutator:
    return EntryMutator(store)
