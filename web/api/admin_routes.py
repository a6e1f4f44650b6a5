"""Admin API routes: catalog management, users and wallets, dashboard."""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from arena.errors import GameNotFound, TournamentNotFound, UserNotFound
from arena.models import (
    GameCreate,
    GameUpdate,
    Region,
    TournamentCreate,
    TournamentUpdate,
    User,
    currency_for_region,
)
from arena.repositories import get_repositories
from arena.services.dashboard import build_dashboard
from arena.services.payments import PaymentService
from arena.services.scheduling import schedule_daily_template
from web.auth import require_admin_user

logger = logging.getLogger("arena.api")

router = APIRouter(prefix="/api/admin", tags=["admin"])


class ScheduleBody(BaseModel):
    region: Region = Region.USA


class WalletUpdate(BaseModel):
    winnings: float = Field(ge=0)
    credits: float = Field(ge=0)


# --- Games ---


@router.post("/games", status_code=status.HTTP_201_CREATED)
async def create_game(body: GameCreate, admin: User = Depends(require_admin_user)):
    game = await get_repositories().games.create(body)
    return game.to_doc()


@router.patch("/games/{game_id}")
async def update_game(game_id: str, body: GameUpdate, admin: User = Depends(require_admin_user)):
    """Edit a game. Sending ``dailyTournamentTemplates`` replaces the whole list."""
    game = await get_repositories().games.update(game_id, body.model_dump(exclude_unset=True))
    if not game:
        raise GameNotFound()
    return game.to_doc()


@router.post("/games/{game_id}/templates/{template_id}/schedule", status_code=status.HTTP_201_CREATED)
async def schedule_template(
    game_id: str, template_id: str, body: ScheduleBody, admin: User = Depends(require_admin_user)
):
    """Create today's tournament from a daily template."""
    tournament = await schedule_daily_template(game_id, template_id, body.region)
    return tournament.to_doc()


# --- Tournaments ---


@router.post("/tournaments", status_code=status.HTTP_201_CREATED)
async def create_tournament(body: TournamentCreate, admin: User = Depends(require_admin_user)):
    repos = get_repositories()
    if not await repos.games.get_by_id(body.game_id):
        raise GameNotFound()
    if "entry_fee_currency" not in body.model_fields_set:
        body.entry_fee_currency = currency_for_region(body.region)
    tournament = await repos.tournaments.create(body)
    return tournament.to_doc()


@router.patch("/tournaments/{tournament_id}")
async def update_tournament(tournament_id: str, body: TournamentUpdate, admin: User = Depends(require_admin_user)):
    """Edit a tournament. Changing ``totalSpots`` keeps the spots already taken."""
    changes = body.model_dump(mode="json", exclude_unset=True)
    tournament = await get_repositories().tournaments.update(tournament_id, changes)
    if not tournament:
        raise TournamentNotFound()
    return tournament.to_doc()


@router.get("/tournaments/{tournament_id}/enrollments")
async def list_tournament_enrollments(tournament_id: str, admin: User = Depends(require_admin_user)):
    repos = get_repositories()
    if not await repos.tournaments.get_by_id(tournament_id):
        raise TournamentNotFound()
    return [e.to_doc() for e in await repos.enrollments.list_by_tournament(tournament_id)]


# --- Users ---


@router.get("/users")
async def list_users(region: Optional[Region] = None, admin: User = Depends(require_admin_user)):
    """List users, optionally only one region (admin only)."""
    users = await get_repositories().users.list(region)
    return [u.public() for u in users]


@router.get("/users/{uid}")
async def get_user(uid: str, admin: User = Depends(require_admin_user)):
    user = await get_repositories().users.get_by_id(uid)
    if not user:
        raise UserNotFound()
    return user.public()


@router.put("/users/{uid}/wallet")
async def set_user_wallet(uid: str, body: WalletUpdate, admin: User = Depends(require_admin_user)):
    """Overwrite a user's balances; the differences go into their transaction history."""
    user = await PaymentService().set_wallet_balance(uid, body.winnings, body.credits)
    logger.info("Admin %s set wallet of %s", admin.uid, uid)
    return user.public()


# --- Dashboard ---


@router.get("/dashboard")
async def dashboard(region: Region = Region.USA, admin: User = Depends(require_admin_user)):
    return await build_dashboard(region)
