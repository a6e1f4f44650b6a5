"""Repository base: one entity collection stored as one document."""
from __future__ import annotations

from typing import Any, Callable, Generic, Optional, TypeVar

from pydantic import ValidationError

from arena.errors import ValidationFailed
from arena.models import Record
from arena.store import DocumentStore

M = TypeVar("M", bound=Record)
R = TypeVar("R")


def validation_message(e: ValidationError) -> str:
    parts = []
    for err in e.errors():
        loc = ".".join(str(x) for x in err.get("loc", ()))
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "; ".join(parts) or "Invalid data"


class Repository(Generic[M]):
    """CRUD over a list of records. Every write is a single ``store.mutate``."""

    document: str
    model: type[M]
    key = "id"

    def __init__(self, store: DocumentStore):
        self.store = store

    def _parse(self, row: dict) -> M:
        return self.model.model_validate(row)

    async def _rows(self) -> list[dict]:
        rows = await self.store.read(self.document, [])
        return rows if isinstance(rows, list) else []

    async def _mutate(self, fn: Callable[[list[dict]], R]) -> R:
        return await self.store.mutate(self.document, fn, [])

    def _index(self, rows: list[dict], key_value: str) -> int:
        for i, row in enumerate(rows):
            if row.get(self.key) == key_value:
                return i
        return -1

    def _merge(self, row: dict, changes: dict[str, Any]) -> M:
        """Apply snake_case ``changes`` to a stored row and re-validate."""
        current = self._parse(row).model_dump()
        current.update(changes)
        try:
            return self.model.model_validate(current)
        except ValidationError as e:
            raise ValidationFailed(validation_message(e)) from e

    async def list(self) -> list[M]:
        return [self._parse(r) for r in await self._rows()]

    async def get_by_id(self, key_value: str) -> Optional[M]:
        for row in await self._rows():
            if row.get(self.key) == key_value:
                return self._parse(row)
        return None

    async def update(self, key_value: str, changes: dict[str, Any]) -> Optional[M]:
        """Merge ``changes`` into the record; None if it doesn't exist."""

        def apply(rows: list[dict]):
            i = self._index(rows, key_value)
            if i < 0:
                return None
            updated = self._merge(rows[i], changes)
            rows[i] = updated.to_doc()
            return rows[i]

        row = await self._mutate(apply)
        return self._parse(row) if row is not None else None
