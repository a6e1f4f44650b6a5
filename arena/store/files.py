"""JSON-file backend: ``<data_dir>/<name>.json`` per document."""
from __future__ import annotations

import asyncio
import json
import os
from pathlib import Path
from typing import Any

from arena.errors import StoreError
from arena.store.base import _MISSING, DocumentStore, logger


class JsonFileStore(DocumentStore):
    """Documents as pretty-printed JSON files in one directory."""

    def __init__(self, data_dir: Path | str, cache_ttl: float = 0.0):
        super().__init__(cache_ttl=cache_ttl)
        self.data_dir = Path(data_dir)

    def _path(self, name: str) -> Path:
        if not name or "/" in name or "\\" in name or name.startswith("."):
            raise StoreError(f"Invalid document name: {name!r}")
        return self.data_dir / f"{name}.json"

    async def init(self) -> None:
        await asyncio.to_thread(self.data_dir.mkdir, parents=True, exist_ok=True)

    def _read_file(self, path: Path) -> Any:
        if not path.exists():
            return _MISSING
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.error("Failed to read %s: %s", path, e)
            raise StoreError(f"Failed to read {path.name}") from e

    def _write_file(self, path: Path, data: Any) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(".json.tmp")
        try:
            tmp.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
            os.replace(tmp, path)
        except (OSError, TypeError, ValueError) as e:
            logger.error("Failed to write %s: %s", path, e)
            raise StoreError(f"Failed to write {path.name}") from e

    async def _load(self, name: str) -> Any:
        return await asyncio.to_thread(self._read_file, self._path(name))

    async def _save(self, name: str, data: Any) -> None:
        await asyncio.to_thread(self._write_file, self._path(name), data)

    async def _remove(self, name: str) -> bool:
        path = self._path(name)

        def _unlink() -> bool:
            if not path.exists():
                return False
            path.unlink()
            return True

        return await asyncio.to_thread(_unlink)
