"""Turn a game's daily tournament template into today's tournament."""
from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from arena.errors import GameNotFound, TemplateNotFound, TemplateTimePassed
from arena.models import Region, Tournament, TournamentCreate, currency_for_region, normalize_region
from arena.repositories import Repositories, get_repositories

logger = logging.getLogger("arena.scheduling")


async def schedule_daily_template(
    game_id: str,
    template_id: str,
    region: Region | str,
    today: Optional[datetime] = None,
    repos: Optional[Repositories] = None,
) -> Tournament:
    """Create today's instance of a template. ``today`` is the current UTC moment."""
    repos = repos or get_repositories()
    region = normalize_region(region)
    now = today or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    game = await repos.games.get_by_id(game_id)
    if game is None:
        raise GameNotFound()
    template = game.template(template_id)
    if template is None:
        raise TemplateNotFound()

    hour, minute = template.hour_minute
    starts = now.replace(hour=hour, minute=minute, second=0, microsecond=0)
    if starts <= now:
        raise TemplateTimePassed(
            f'The time for "{template.template_name}" ({template.tournament_time}) '
            "has already passed for today."
        )

    tournament = await repos.tournaments.create(TournamentCreate(
        game_id=game.id,
        game_mode_id=template.game_mode_id,
        name=f"{template.template_name} - Daily - {starts:%b} {starts.day}",
        tournament_date=starts,
        registration_close_date=starts - timedelta(hours=template.registration_close_offset_hours),
        entry_fee=template.entry_fee,
        entry_fee_currency=currency_for_region(region),
        prize_pool=template.prize_pool,
        image_url=template.image_url,
        total_spots=template.total_spots,
        region=region,
        is_special=False,
    ))
    logger.info("Scheduled %s from template %s/%s", tournament.id, game.id, template.id)
    return tournament
