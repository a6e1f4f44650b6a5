"""Wallet ledger entry."""
from __future__ import annotations

from enum import Enum
from typing import Optional

from arena.models.base import Record


class TransactionType(str, Enum):
    CREDIT_PURCHASE = "credit_purchase"
    TOURNAMENT_ENTRY = "tournament_entry"
    WINNINGS_PAYOUT = "winnings_payout"
    ADMIN_CREDIT_ADJUSTMENT = "admin_credit_adjustment"
    ADMIN_WINNINGS_ADJUSTMENT = "admin_winnings_adjustment"


class Transaction(Record):
    """Append-only. ``amount`` is negative for debits."""

    id: str
    user_id: str
    type: TransactionType
    amount: float
    currency: str  # credits, winnings, mixed, USD, INR
    description: str = ""
    related_id: Optional[str] = None
    date: str


class TransactionCreate(Record):
    user_id: str
    type: TransactionType
    amount: float
    currency: str
    description: str = ""
    related_id: Optional[str] = None
