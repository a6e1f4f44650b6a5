"""Transaction ledger repository. Entries are only ever appended."""
from __future__ import annotations

from typing import Any, Optional

from arena.errors import AppendOnlyLedger
from arena.models import Transaction, TransactionCreate, local_id, parse_iso, utcnow_iso
from arena.repositories.base import Repository


class TransactionRepository(Repository[Transaction]):
    document = "transactions"
    model = Transaction

    async def list_by_user(self, user_id: str) -> list[Transaction]:
        """User's transactions, newest first."""
        txs = [t for t in await self.list() if t.user_id == user_id]

        def when(t: Transaction) -> float:
            dt = parse_iso(t.date)
            return dt.timestamp() if dt else 0.0

        return sorted(txs, key=when, reverse=True)

    async def create(self, data: TransactionCreate) -> Transaction:
        tx = Transaction(id=local_id("tx"), date=utcnow_iso(), **data.model_dump())

        def append(rows: list[dict]):
            rows.append(tx.to_doc())

        await self._mutate(append)
        return tx

    async def update(self, key_value: str, changes: dict[str, Any]) -> Optional[Transaction]:
        raise AppendOnlyLedger()
