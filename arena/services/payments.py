"""Credit top-ups through manual payment requests, and admin wallet corrections."""
from __future__ import annotations

import logging
from typing import Optional

from arena.errors import PaymentRequestProcessed, ValidationFailed
from arena.models import PaymentRequest, TransactionCreate, TransactionType, User, Wallet
from arena.repositories import Repositories, get_repositories
from arena.services.wallet import to_cents

logger = logging.getLogger("arena.payments")


class PaymentService:
    def __init__(self, repos: Optional[Repositories] = None):
        self.repos = repos or get_repositories()

    async def submit_payment_request(self, user: User, transaction_id: str, amount: float) -> PaymentRequest:
        """Record a user's claim that they paid ``amount`` with ``transaction_id``."""
        transaction_id = (transaction_id or "").strip()
        if not transaction_id:
            raise ValidationFailed("Transaction ID is required")
        if amount is None or amount <= 0:
            raise ValidationFailed("Amount must be greater than zero")
        request = await self.repos.payment_requests.create(transaction_id, user.uid, user.email, amount)
        logger.info("Payment request %s submitted by %s for %.2f credits", request.id, user.uid, amount)
        return request

    async def approve_payment_request(self, request_id: str) -> PaymentRequest:
        """Credit the requested amount to the user. Only pending requests are approved."""
        request, previous = await self.repos.payment_requests.transition(request_id, "approved")
        if previous != "pending":
            raise PaymentRequestProcessed(f"Payment request is already {previous}.")

        def credit(wallet: Wallet):
            wallet.credits = float(to_cents(wallet.credits) + to_cents(request.amount))
            return wallet, None

        try:
            await self.repos.users.update_wallet(request.user_id, credit)
        except Exception:
            # put it back so it can be approved again or declined
            logger.exception("Crediting user %s for payment %s failed", request.user_id, request.id)
            await self.repos.payment_requests.update(request.id, {"status": "pending", "processed_date": None})
            raise

        try:
            await self.repos.transactions.create(TransactionCreate(
                user_id=request.user_id,
                type=TransactionType.CREDIT_PURCHASE,
                amount=request.amount,
                currency="credits",
                description=f"Approved payment request. Transaction ID: {request.id}",
                related_id=request.id,
            ))
        except Exception:
            logger.exception(
                "CRITICAL: credited %.2f to %s for payment %s but the transaction log failed",
                request.amount, request.user_id, request.id,
            )
        logger.info("Approved payment request %s: %.2f credits to %s", request.id, request.amount, request.user_id)
        return request

    async def decline_payment_request(self, request_id: str, notes: Optional[str] = None) -> PaymentRequest:
        request, previous = await self.repos.payment_requests.transition(request_id, "declined", notes)
        if previous == "approved":
            raise PaymentRequestProcessed("Payment request was already approved.")
        if previous == "pending":
            logger.info("Declined payment request %s", request.id)
        return request

    async def set_wallet_balance(self, uid: str, winnings: float, credits: float) -> User:
        """Admin correction: overwrite both balances and log the differences."""
        if winnings is None or credits is None or winnings < 0 or credits < 0:
            raise ValidationFailed("Wallet balances must be non-negative numbers")
        target = Wallet(winnings=float(to_cents(winnings)), credits=float(to_cents(credits)))

        def replace(wallet: Wallet):
            return target, wallet

        user, before = await self.repos.users.update_wallet(uid, replace)

        adjustments = [
            (TransactionType.ADMIN_CREDIT_ADJUSTMENT, "credits", to_cents(target.credits) - to_cents(before.credits)),
            (TransactionType.ADMIN_WINNINGS_ADJUSTMENT, "winnings", to_cents(target.winnings) - to_cents(before.winnings)),
        ]
        for tx_type, component, delta in adjustments:
            if delta == 0:
                continue
            await self.repos.transactions.create(TransactionCreate(
                user_id=uid,
                type=tx_type,
                amount=float(delta),
                currency=component,
                description=f"Admin adjustment of {component}: "
                f"{getattr(before, component):.2f} -> {getattr(target, component):.2f}",
            ))
        logger.info("Wallet of %s set to credits %.2f, winnings %.2f", uid, target.credits, target.winnings)
        return user
