"""Player-facing API routes: game catalog, tournaments, enrollment, wallet."""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, ConfigDict, Field

from arena.errors import GameNotFound, TournamentNotFound
from arena.models import Region, User
from arena.repositories import get_repositories
from arena.services.enrollment import EnrollmentRequest, EnrollmentService
from arena.services.payments import PaymentService
from web.auth import get_current_user, require_user

logger = logging.getLogger("arena.api")

router = APIRouter(prefix="/api", tags=["tournaments"])


# --- Pydantic schemas ---


class EnrollBody(BaseModel):
    in_game_name: str = Field(alias="inGameName")

    model_config = ConfigDict(populate_by_name=True)


class PaymentRequestBody(BaseModel):
    transaction_id: str = Field(alias="transactionId", min_length=1, max_length=128)
    amount: float = Field(gt=0)

    model_config = ConfigDict(populate_by_name=True)


def _region_for(region: Optional[Region], user: Optional[User]) -> Optional[Region]:
    """Explicit ?region= wins; otherwise a signed-in user sees their own region."""
    if region is not None:
        return region
    return user.region if user else None


# --- Catalog ---


@router.get("/games")
async def list_games():
    return [g.to_doc() for g in await get_repositories().games.list()]


@router.get("/games/{game_id}")
async def get_game(game_id: str):
    game = await get_repositories().games.get_by_id(game_id)
    if not game:
        raise GameNotFound()
    return game.to_doc()


@router.get("/games/{game_id}/tournaments")
async def list_game_tournaments(
    game_id: str,
    region: Optional[Region] = None,
    mode: Optional[str] = None,
    special: bool = False,
    user: Optional[User] = Depends(get_current_user),
):
    """Tournaments of one game, soonest first. ``special`` selects the featured list."""
    repos = get_repositories()
    if not await repos.games.get_by_id(game_id):
        raise GameNotFound()
    tournaments = await repos.tournaments.list_by_game(
        game_id, _region_for(region, user), game_mode_id=mode, special=special
    )
    return [t.to_doc() for t in tournaments]


@router.get("/tournaments")
async def list_tournaments(region: Optional[Region] = None, user: Optional[User] = Depends(get_current_user)):
    tournaments = await get_repositories().tournaments.list(_region_for(region, user))
    return [t.to_doc() for t in tournaments]


@router.get("/tournaments/{tournament_id}")
async def get_tournament(tournament_id: str):
    tournament = await get_repositories().tournaments.get_by_id(tournament_id)
    if not tournament:
        raise TournamentNotFound()
    return tournament.to_doc()


# --- Enrollment ---


@router.post("/games/{game_id}/tournaments/{tournament_id}/enroll", status_code=status.HTTP_201_CREATED)
async def enroll(game_id: str, tournament_id: str, body: EnrollBody, user: User = Depends(require_user)):
    """Pay the entry fee and take a spot. Errors come back with a ``code`` the UI can switch on."""
    result = await EnrollmentService().enroll(EnrollmentRequest(
        game_id=game_id,
        tournament_id=tournament_id,
        user_id=user.uid,
        in_game_name=body.in_game_name,
    ))
    if result.audit_degraded:
        logger.error("Enrollment %s returned with a warning: %s", result.enrollment.id, result.warning)
    return result.to_dict()


@router.get("/me/enrollments")
async def my_enrollments(user: User = Depends(require_user)):
    enrollments = await get_repositories().enrollments.list_by_user(user.uid)
    return [e.to_doc() for e in enrollments]


@router.get("/tournaments/{tournament_id}/enrollment")
async def my_enrollment_status(tournament_id: str, user: User = Depends(require_user)):
    """Whether the current user is in this tournament, and with which name."""
    enrollments = await get_repositories().enrollments.list_by_user(user.uid)
    mine = next((e for e in enrollments if e.tournament_id == tournament_id), None)
    return {"enrolled": mine is not None, "enrollment": mine.to_doc() if mine else None}


# --- Wallet ---


@router.get("/me/wallet")
async def my_wallet(user: User = Depends(require_user)):
    wallet = user.wallet_balance
    return {**wallet.to_doc(), "total": round(wallet.total, 2)}


@router.get("/me/transactions")
async def my_transactions(user: User = Depends(require_user)):
    return [t.to_doc() for t in await get_repositories().transactions.list_by_user(user.uid)]


@router.get("/me/payment-requests")
async def my_payment_requests(user: User = Depends(require_user)):
    return [r.to_doc() for r in await get_repositories().payment_requests.list_by_user(user.uid)]


@router.post("/me/payment-requests", status_code=status.HTTP_201_CREATED)
async def submit_payment_request(body: PaymentRequestBody, user: User = Depends(require_user)):
    """Submit the transaction id of a QR payment for an admin to verify."""
    request = await PaymentService().submit_payment_request(user, body.transaction_id, body.amount)
    return request.to_doc()

