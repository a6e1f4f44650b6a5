"""Tests for dashboard aggregation."""
from datetime import datetime, timedelta, timezone

import pytest

from arena.models import Region
from arena.services.dashboard import build_dashboard, parse_prize_pool


@pytest.mark.parametrize(
    "text, expected",
    [
        ("$1,000", 1000.0),
        ("₹ 5,000.50 + trophies", 5000.5),
        ("500 credits", 500.0),
        ("", 0.0),
        (None, 0.0),
        ("Glory only", 0.0),
        ("€250", 250.0),
    ],
)
def test_parse_prize_pool(text, expected):
    assert parse_prize_pool(text) == expected


@pytest.mark.asyncio
async def test_dashboard_figures(repos, make_user, make_tournament):
    now = datetime(2026, 6, 15, 12, 0, tzinfo=timezone.utc)
    past = await make_tournament(
        name="Spring Finals", entry_fee=10, total_spots=8, prize_pool="$50",
        tournament_date=now - timedelta(days=3),
    )
    soon = await make_tournament(
        name="A Very Long Tournament Name Indeed", entry_fee=5, total_spots=4, prize_pool="100 credits",
        tournament_date=now + timedelta(days=1),
    )
    await make_tournament(game_id="minecraft", entry_fee=0, total_spots=2, tournament_date=now + timedelta(days=2))
    await make_tournament(region=Region.INDIA, entry_fee=100, total_spots=4, tournament_date=now + timedelta(days=1))
    await repos.tournaments.update(past.id, {"spots_left": 2})  # 6 taken
    await repos.tournaments.update(soon.id, {"spots_left": 1})  # 3 taken

    await make_user(email="a@example.com")
    await make_user(email="b@example.com")
    await make_user(email="c@example.com", region=Region.INDIA)

    data = await build_dashboard(Region.USA, now=now, repos=repos)

    assert data["total_tournaments"] == 3
    assert data["upcoming_count"] == 2
    assert data["hosted_count"] == 1
    assert data["regional_users"] == 2
    assert data["supported_games"] == 2
    assert data["gross_revenue"] == 6 * 10 + 3 * 5
    assert data["prize_payout"] == 150
    assert data["net_revenue"] == 75 - 150
    assert data["currency"] == "USD"
    assert {g["game_name"]: g["count"] for g in data["tournaments_by_game"]} == {"Free Fire": 2, "Minecraft": 1}
    assert data["fill_rate"][0] == {"name": "A Very Long Tourn...", "filled": 3, "remaining": 1, "total": 4}
    assert len(data["fill_rate"]) == 2
    month = datetime.now(timezone.utc).strftime("%Y-%m")
    assert data["registration_trend"] == [{"month": month, "count": 3}]


@pytest.mark.asyncio
async def test_dashboard_india_uses_inr_and_unknown_games(repos, make_tournament):
    await make_tournament(game_id="retired-game", region=Region.INDIA)
    data = await build_dashboard("india", repos=repos)
    assert data["currency"] == "INR"
    assert data["tournaments_by_game"] == [{"game_name": "Unknown Game", "count": 1}]


@pytest.mark.asyncio
async def test_unparseable_dates_are_neither_upcoming_nor_hosted(store, repos, make_tournament):
    await make_tournament()
    rows = await store.read("tournaments", [])
    rows[0]["tournamentDate"] = "someday"
    await store.write("tournaments", rows)
    data = await build_dashboard(Region.USA, repos=repos)
    assert data["total_tournaments"] == 1
    assert data["upcoming_count"] == 0
    assert data["hosted_count"] == 0
