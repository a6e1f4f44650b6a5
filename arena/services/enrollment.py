"""Tournament enrollment.

One enrollment touches four documents (user, tournament, enrollments,
transactions) and there is no transaction spanning them. The sequence is:

1. check preconditions (no side effects)
2. compute the fee split, credits first (no side effects)
3. debit the wallet
4. reserve a spot            -> on failure: refund wallet
5. create the enrollment     -> on failure: refund wallet, release spot
6. log the ledger entry      -> on failure: keep everything, return a warning

Each completed effect pushes its compensation onto a stack. Steps 4 and 5
have their own handlers; anything else that escapes steps 3-5 unwinds the
whole stack before the error is reported.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional

from arena.errors import (
    AlreadyEnrolled,
    ArenaError,
    EnrollmentFailed,
    EnrollmentRecordFailed,
    GameMismatch,
    GameNotFound,
    RegionMismatch,
    SpotUnavailable,
    TournamentFull,
    TournamentNotFound,
    UserNotFound,
    ValidationFailed,
)
from arena.models import (
    Enrollment,
    EnrollmentCreate,
    Game,
    Tournament,
    Transaction,
    TransactionCreate,
    TransactionType,
    User,
)
from arena.models.enrollment import IN_GAME_NAME_MAX, IN_GAME_NAME_MIN
from arena.repositories import Repositories, get_repositories
from arena.services.wallet import Deduction, compute_deduction, pay, refund

logger = logging.getLogger("arena.enrollment")


@dataclass
class EnrollmentRequest:
    game_id: str
    tournament_id: str
    user_id: str
    in_game_name: str


@dataclass
class EnrollmentResult:
    tournament: Tournament
    enrollment: Enrollment
    deduction: Deduction
    transaction: Optional[Transaction] = None
    warning: Optional[str] = None

    @property
    def audit_degraded(self) -> bool:
        return self.transaction is None

    def to_dict(self) -> dict:
        return {
            "tournament": self.tournament.to_doc(),
            "enrollment": self.enrollment.to_doc(),
            "transaction": self.transaction.to_doc() if self.transaction else None,
            "creditsUsed": self.deduction.credits,
            "winningsUsed": self.deduction.winnings,
            "warning": self.warning,
        }


@dataclass
class _Compensations:
    """Undo actions for completed effects, run newest first."""

    steps: list[tuple[str, Callable[[], Awaitable[object]]]] = field(default_factory=list)

    def push(self, label: str, action: Callable[[], Awaitable[object]]) -> None:
        self.steps.append((label, action))

    async def run(self, context: str, oldest_first: bool = False) -> list[str]:
        """Run every compensation; a failing one is logged and the rest still run."""
        failed = []
        while self.steps:
            label, action = self.steps.pop(0 if oldest_first else -1)
            try:
                await action()
                logger.warning("%s: compensated (%s)", context, label)
            except Exception:
                logger.exception("%s: compensation failed (%s)", context, label)
                failed.append(label)
        return failed


def _reason(e: Exception) -> str:
    if isinstance(e, ArenaError):
        return e.message.rstrip(".")
    return "unexpected error"


def validate_in_game_name(name: Optional[str]) -> str:
    name = (name or "").strip()
    if len(name) < IN_GAME_NAME_MIN:
        raise ValidationFailed(f"In-game name must be at least {IN_GAME_NAME_MIN} characters")
    if len(name) > IN_GAME_NAME_MAX:
        raise ValidationFailed(f"In-game name must be {IN_GAME_NAME_MAX} characters or less")
    return name


class EnrollmentService:
    """Runs one user's tournament signup as a compensated sequence."""

    def __init__(self, repos: Optional[Repositories] = None):
        self.repos = repos or get_repositories()

    async def check_preconditions(self, request: EnrollmentRequest) -> tuple[Tournament, Game, User]:
        """Load tournament, game and user and refuse if enrollment isn't allowed."""
        tournament = await self.repos.tournaments.get_by_id(request.tournament_id)
        if tournament is None:
            raise TournamentNotFound()
        game = await self.repos.games.get_by_id(request.game_id)
        if game is None:
            raise GameNotFound()
        if tournament.game_id != game.id:
            raise GameMismatch("Tournament or game not found, or mismatch.")
        user = await self.repos.users.get_by_id(request.user_id)
        if user is None:
            raise UserNotFound()
        if tournament.region != user.region:
            raise RegionMismatch(
                f"This tournament is for the {tournament.region.value} region. "
                f"Your region is {user.region.value}."
            )
        if await self.repos.enrollments.exists(user.uid, tournament.id):
            raise AlreadyEnrolled(f"You are already enrolled in {tournament.name}.")
        if tournament.spots_left <= 0:
            raise TournamentFull()
        return tournament, game, user

    async def enroll(self, request: EnrollmentRequest) -> EnrollmentResult:
        in_game_name = validate_in_game_name(request.in_game_name)
        tournament, game, user = await self.check_preconditions(request)
        fee = tournament.entry_fee
        # Rejects before anything is written
        compute_deduction(user.wallet_balance, fee)

        context = f"enroll user={user.uid} tournament={tournament.id}"
        undo = _Compensations()
        try:
            _, deduction = await self.repos.users.update_wallet(user.uid, pay(fee))
            undo.push("refund wallet", lambda: self.repos.users.update_wallet(user.uid, refund(deduction)))
            logger.info(
                "%s: debited %.2f (credits %.2f, winnings %.2f)",
                context, fee, deduction.credits, deduction.winnings,
            )

            try:
                reserved = await self.repos.tournaments.reserve_spot(tournament.id)
            except Exception as e:
                await undo.run(context)
                reason = _reason(e)
                logger.warning("%s: spot reservation failed: %s", context, reason)
                raise SpotUnavailable(
                    f"Failed to secure a spot: {reason}. Your wallet balance has been restored."
                ) from e
            undo.push("release spot", lambda: self.repos.tournaments.release_spot(tournament.id))

            try:
                enrollment = await self.repos.enrollments.create(EnrollmentCreate(
                    tournament_id=tournament.id,
                    tournament_name=tournament.name,
                    game_id=game.id,
                    user_id=user.uid,
                    user_email=user.email,
                    in_game_name=in_game_name,
                ))
            except AlreadyEnrolled:
                # concurrent submit won the unique (user, tournament) check
                await undo.run(context, oldest_first=True)
                logger.info("%s: already enrolled by a concurrent request", context)
                raise
            except Exception as e:
                # wallet first, then spot
                await undo.run(context, oldest_first=True)
                reason = _reason(e)
                logger.warning("%s: enrollment record failed: %s", context, reason)
                raise EnrollmentRecordFailed(
                    f"Enrollment record creation failed: {reason}. Your balance and the "
                    "tournament spot have been restored. Please try again or contact support."
                ) from e
        except ArenaError:
            # step handlers have already emptied the stack
            await undo.run(context)
            raise
        except Exception as e:
            logger.exception("%s: unexpected failure", context)
            await undo.run(context)
            raise EnrollmentFailed() from e

        transaction, warning = await self._log_entry_fee(tournament, user, enrollment, deduction)
        logger.info("%s: enrolled as %s (enrollment %s)", context, in_game_name, enrollment.id)
        return EnrollmentResult(
            tournament=reserved,
            enrollment=enrollment,
            deduction=deduction,
            transaction=transaction,
            warning=warning,
        )

    async def _log_entry_fee(
        self, tournament: Tournament, user: User, enrollment: Enrollment, deduction: Deduction
    ) -> tuple[Optional[Transaction], Optional[str]]:
        """Append the ledger entry. A failure here doesn't undo the enrollment."""
        description = (
            f"Entry fee for {tournament.name} ({tournament.region.value}). "
            f"Credits used: {deduction.credits:.2f}, Winnings used: {deduction.winnings:.2f}."
        )
        try:
            tx = await self.repos.transactions.create(TransactionCreate(
                user_id=user.uid,
                type=TransactionType.TOURNAMENT_ENTRY,
                amount=-tournament.entry_fee,
                currency=tournament.entry_fee_currency,
                description=description,
                related_id=tournament.id,
            ))
        except Exception:
            logger.exception(
                "CRITICAL: failed to log transaction for enrollment %s, user %s, tournament %s. "
                "Wallet was debited and spot taken.",
                enrollment.id, user.uid, tournament.id,
            )
            return None, (
                "Enrollment succeeded but transaction logging failed. Please contact support "
                f"with details: Enrollment ID {enrollment.id}, Tournament {tournament.name}."
            )
        return tx, None
