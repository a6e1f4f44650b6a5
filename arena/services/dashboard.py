"""Admin dashboard figures for one region."""
from __future__ import annotations

import asyncio
import logging
import re
from collections import Counter
from datetime import datetime, timezone
from typing import Optional

from arena.models import Region, currency_for_region, normalize_region, parse_iso
from arena.repositories import Repositories, get_repositories

logger = logging.getLogger("arena.dashboard")

_AMOUNT_RE = re.compile(r"[$₹€]?\s*(\d{1,3}(,\d{3})*(\.\d{1,2})?)")
_NUMBER_RE = re.compile(r"\d+(\.\d+)?")

FILL_RATE_LIMIT = 5


def parse_prize_pool(text: Optional[str]) -> float:
    """Best-effort number out of free-text prize pools like "$1,000 + merch"."""
    if not text:
        return 0.0
    match = _AMOUNT_RE.search(text)
    if match:
        return float(match.group(1).replace(",", ""))
    numbers = [float(m.group(0)) for m in _NUMBER_RE.finditer(text)]
    return sum(numbers) if numbers else 0.0


def _short_name(name: str) -> str:
    return name[:17] + "..." if len(name) > 20 else name


def _month(created_at: int) -> str:
    return datetime.fromtimestamp(created_at / 1000, tz=timezone.utc).strftime("%Y-%m")


async def build_dashboard(
    region: Region | str,
    now: Optional[datetime] = None,
    repos: Optional[Repositories] = None,
) -> dict:
    repos = repos or get_repositories()
    region = normalize_region(region)
    now = now or datetime.now(timezone.utc)

    tournaments, users, games = await asyncio.gather(
        repos.tournaments.list(region),
        repos.users.list(),
        repos.games.list(),
    )

    upcoming, hosted = [], []
    for t in tournaments:
        when = parse_iso(t.tournament_date)
        if when is None:
            logger.warning("Tournament %s has an unparseable date %r", t.id, t.tournament_date)
            continue
        (upcoming if when > now else hosted).append((when, t))

    gross = sum(t.spots_filled * t.entry_fee for t in tournaments)
    payout = sum(parse_prize_pool(t.prize_pool) for t in tournaments)

    game_names = {g.id: g.name for g in games}
    by_game = Counter(game_names.get(t.game_id, "Unknown Game") for t in tournaments)

    soonest = [t for _, t in sorted(upcoming, key=lambda pair: pair[0])[:FILL_RATE_LIMIT]]

    trend = Counter(_month(u.created_at) for u in users if u.created_at)

    return {
        "region": region.value,
        "total_tournaments": len(tournaments),
        "upcoming_count": len(upcoming),
        "hosted_count": len(hosted),
        "regional_users": sum(1 for u in users if u.region == region),
        "supported_games": len(games),
        "gross_revenue": round(gross, 2),
        "prize_payout": round(payout, 2),
        "net_revenue": round(gross - payout, 2),
        "currency": currency_for_region(region),
        "tournaments_by_game": [
            {"game_name": name, "count": count} for name, count in by_game.items()
        ],
        "fill_rate": [
            {
                "name": _short_name(t.name),
                "filled": t.spots_filled,
                "remaining": t.spots_left,
                "total": t.total_spots,
            }
            for t in soonest
        ],
        "registration_trend": [
            {"month": month, "count": trend[month]} for month in sorted(trend)
        ],
    }
