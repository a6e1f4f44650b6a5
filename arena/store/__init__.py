"""Document store and the process-wide instance."""
from __future__ import annotations

from typing import Optional

import config
from arena.store.base import DocumentStore
from arena.store.files import JsonFileStore
from arena.store.sql import SqlDocumentStore

__all__ = [
    "DocumentStore",
    "JsonFileStore",
    "SqlDocumentStore",
    "create_store",
    "get_store",
    "set_store",
]

_store: Optional[DocumentStore] = None


def create_store(backend: Optional[str] = None) -> DocumentStore:
    """Build the backend named by ``backend`` (default: ``config.STORE_BACKEND``)."""
    backend = (backend or config.STORE_BACKEND).lower()
    if backend == "file":
        return JsonFileStore(config.DATA_DIR, cache_ttl=config.STORE_CACHE_TTL)
    if backend == "sql":
        return SqlDocumentStore(config.DATABASE_URL, cache_ttl=config.STORE_CACHE_TTL)
    raise ValueError(f"Unknown STORE_BACKEND: {backend!r} (expected 'file' or 'sql')")


def get_store() -> DocumentStore:
    global _store
    if _store is None:
        _store = create_store()
    return _store


def set_store(store: Optional[DocumentStore]) -> None:
    """Replace the process-wide store (tests install a temp-dir store)."""
    global _store
    _store = store
