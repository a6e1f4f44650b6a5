"""Entry fee payment: how much comes out of credits and how much out of winnings."""
from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from arena.errors import InsufficientBalance
from arena.models import Wallet

_CENTS = Decimal("0.01")


def to_cents(value: float) -> Decimal:
    return Decimal(str(value)).quantize(_CENTS, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class Deduction:
    credits: float
    winnings: float

    @property
    def total(self) -> float:
        return float(to_cents(self.credits) + to_cents(self.winnings))

    def apply(self, wallet: Wallet) -> Wallet:
        """Wallet after paying this deduction."""
        return Wallet(
            credits=float(to_cents(wallet.credits) - to_cents(self.credits)),
            winnings=float(to_cents(wallet.winnings) - to_cents(self.winnings)),
        )

    def refund(self, wallet: Wallet) -> Wallet:
        """Wallet with this deduction given back."""
        return Wallet(
            credits=float(to_cents(wallet.credits) + to_cents(self.credits)),
            winnings=float(to_cents(wallet.winnings) + to_cents(self.winnings)),
        )


def pay(fee: float):
    """Wallet update function for ``UserRepository.update_wallet``: debit ``fee``."""

    def _pay(wallet: Wallet) -> tuple[Wallet, Deduction]:
        deduction = compute_deduction(wallet, fee)
        return deduction.apply(wallet), deduction

    return _pay


def refund(deduction: Deduction):
    """Wallet update function that gives ``deduction`` back."""

    def _refund(wallet: Wallet) -> tuple[Wallet, None]:
        return deduction.refund(wallet), None

    return _refund


def compute_deduction(wallet: Wallet, fee: float) -> Deduction:
    """Credits are used up first; winnings cover the rest.

    Raises InsufficientBalance if credits + winnings can't cover ``fee``.
    """
    credits = to_cents(wallet.credits)
    winnings = to_cents(wallet.winnings)
    amount = to_cents(fee)
    if credits + winnings < amount:
        raise InsufficientBalance(
            f"Insufficient balance. You need {amount} but only have {credits + winnings}."
        )
    from_credits = min(credits, amount)
    from_winnings = max(Decimal(0), amount - from_credits)
    return Deduction(credits=float(from_credits), winnings=float(from_winnings))
