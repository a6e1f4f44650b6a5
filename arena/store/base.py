"""Document store: one JSON document per entity collection."""
from __future__ import annotations

import asyncio
import copy
import logging
import time
from collections import defaultdict
from typing import Any, Callable, Optional, TypeVar

logger = logging.getLogger("arena.store")

T = TypeVar("T")

_MISSING = object()


class DocumentStore:
    """Read/write named JSON documents.

    Subclasses implement ``_load`` (return ``_MISSING`` when the document is
    absent), ``_save`` and ``_remove``. This class owns locking and caching:

    * every document has one ``asyncio.Lock`` per store instance; ``mutate``
      holds it across read-modify-write, so writes through one store never
      interleave on the same document.
    * reads go through a cache filled on first read and replaced on each
      write. With ``cache_ttl > 0`` an entry is trusted for that many seconds
      and then re-read, which bounds how stale a read can be when another
      process writes the same backend. ``cache_ttl == 0`` disables the cache.
      ``mutate`` always re-reads from the backend.
    """

    def __init__(self, cache_ttl: float = 0.0):
        self.cache_ttl = cache_ttl
        self._locks: dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)
        self._cache: dict[str, tuple[float, Any]] = {}

    async def init(self) -> None:
        """Prepare the backend (create directories/tables)."""

    async def close(self) -> None:
        """Release backend resources."""

    # --- backend hooks ---

    async def _load(self, name: str) -> Any:
        raise NotImplementedError

    async def _save(self, name: str, data: Any) -> None:
        raise NotImplementedError

    async def _remove(self, name: str) -> bool:
        raise NotImplementedError

    # --- cache ---

    def _cached(self, name: str) -> Any:
        if self.cache_ttl <= 0:
            return _MISSING
        entry = self._cache.get(name)
        if entry is None:
            return _MISSING
        stored_at, data = entry
        if time.monotonic() - stored_at > self.cache_ttl:
            self._cache.pop(name, None)
            return _MISSING
        return data

    def _remember(self, name: str, data: Any) -> None:
        if self.cache_ttl > 0:
            self._cache[name] = (time.monotonic(), copy.deepcopy(data))

    def invalidate(self, name: Optional[str] = None) -> None:
        """Drop one cached document, or all of them."""
        if name is None:
            self._cache.clear()
        else:
            self._cache.pop(name, None)

    # --- public API ---

    async def read(self, name: str, default: Any = None) -> Any:
        """Return a copy of the document, or a copy of ``default`` if absent."""
        data = self._cached(name)
        if data is _MISSING:
            data = await self._load(name)
            if data is _MISSING:
                return copy.deepcopy(default)
            self._remember(name, data)
        return copy.deepcopy(data)

    async def write(self, name: str, data: Any) -> None:
        """Replace the whole document."""
        async with self._locks[name]:
            await self._save(name, data)
            self._remember(name, data)

    async def mutate(self, name: str, fn: Callable[[Any], T], default: Any = None) -> T:
        """Atomically apply ``fn`` to the document and persist it.

        ``fn`` receives the current document, changes it in place and returns
        a result. If ``fn`` raises, nothing is written and the error
        propagates.
        """
        async with self._locks[name]:
            data = await self._load(name)
            if data is _MISSING:
                data = copy.deepcopy(default)
            result = fn(data)
            await self._save(name, data)
            self._remember(name, data)
            logger.debug("Document %s updated", name)
            return copy.deepcopy(result)

    async def delete(self, name: str) -> bool:
        async with self._locks[name]:
            self._cache.pop(name, None)
            return await self._remove(name)
