"""User and wallet models."""
from __future__ import annotations

from typing import Optional

from pydantic import Field, field_validator

import config
from arena.models.base import Record, Region, normalize_region


class Wallet(Record):
    """Two sub-balances; credits are spent before winnings."""

    winnings: float = 0
    credits: float = 0

    @property
    def total(self) -> float:
        return self.winnings + self.credits

    def is_valid(self) -> bool:
        return self.winnings >= 0 and self.credits >= 0


class User(Record):
    """Platform user. Admin status comes from the reserved admin email."""

    uid: str
    email: str
    password_hash: str = ""
    display_name: Optional[str] = None
    photo_url: Optional[str] = None
    created_at: Optional[int] = None  # epoch ms
    wallet_balance: Wallet = Field(default_factory=Wallet)
    region: Region = Region.USA

    @field_validator("region", mode="before")
    @classmethod
    def _region(cls, v):
        return normalize_region(v)

    @field_validator("wallet_balance", mode="before")
    @classmethod
    def _wallet(cls, v):
        return v or {"winnings": 0, "credits": 0}

    @property
    def is_admin(self) -> bool:
        return self.email.lower() == config.ADMIN_EMAIL

    def public(self) -> dict:
        """API representation: no password hash, derived admin flag."""
        data = self.to_doc()
        data.pop("passwordHash", None)
        data["isAdmin"] = self.is_admin
        return data


class UserCreate(Record):
    email: str = Field(min_length=3, max_length=254)
    password_hash: str
    display_name: Optional[str] = None
    photo_url: Optional[str] = None
    region: Region = Region.USA
