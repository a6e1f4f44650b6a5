"""Pytest configuration and fixtures for store, service and API tests."""
import os
import tempfile

# Set test env BEFORE any imports that use config
os.environ["STORE_BACKEND"] = "file"
os.environ["DATA_DIR"] = tempfile.mkdtemp(prefix="arena-test-")
os.environ["ADMIN_EMAIL"] = "admin@example.com"
os.environ["ADMIN_PASSWORD"] = "testpass123"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["SEED_DEFAULTS"] = "true"

from datetime import datetime, timedelta, timezone

import pytest
from httpx import ASGITransport, AsyncClient

import config
from arena.models import Region, TournamentCreate, UserCreate, Wallet
from arena.repositories import get_repositories
from arena.store import JsonFileStore, set_store
from web.api.main import app
from web.auth import hash_password


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True)
async def store(tmp_path):
    """Fresh file store per test, seeded like the app does on startup (ASGI lifespan doesn't run with httpx)."""
    s = JsonFileStore(tmp_path / "data")
    await s.init()
    set_store(s)
    repos = get_repositories(s)
    await repos.games.seed()
    await repos.qr_codes.seed()
    yield s
    await s.close()
    set_store(None)


@pytest.fixture
def repos(store):
    return get_repositories(store)


@pytest.fixture
async def client():
    """Async HTTP client for testing the API."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.fixture
def make_user(repos):
    """Create a user directly in the store with the given balances."""

    async def _make(email="player@example.com", region=Region.USA, credits=0.0, winnings=0.0):
        user = await repos.users.create(UserCreate(email=email, password_hash="x", region=region))
        if credits or winnings:
            user = await repos.users.set_wallet(user.uid, Wallet(credits=credits, winnings=winnings))
        return user

    return _make


@pytest.fixture
def make_tournament(repos):
    """Create a tournament starting tomorrow."""

    async def _make(game_id="free-fire", region=Region.USA, entry_fee=50.0, total_spots=10, **kwargs):
        start = datetime.now(timezone.utc) + timedelta(days=1)
        return await repos.tournaments.create(TournamentCreate(
            game_id=game_id,
            name=kwargs.pop("name", "Test Cup"),
            tournament_date=kwargs.pop("tournament_date", start),
            registration_close_date=start - timedelta(hours=1),
            entry_fee=entry_fee,
            total_spots=total_spots,
            region=region,
            **kwargs,
        ))

    return _make


@pytest.fixture
async def auth_headers(client):
    """Sign up a player and return Authorization headers."""
    r = await client.post(
        "/api/auth/signup",
        json={"email": "player@example.com", "password": "secret123", "region": "USA"},
    )
    assert r.status_code == 201, f"Signup failed: {r.text}"
    token = r.json()["access_token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def admin_headers(client, repos):
    """Bootstrap the admin account and log in as admin."""
    await repos.users.ensure_admin(hash_password(config.ADMIN_PASSWORD))
    r = await client.post(
        "/api/auth/login",
        json={"email": config.ADMIN_EMAIL, "password": config.ADMIN_PASSWORD},
    )
    assert r.status_code == 200, f"Login failed: {r.text}"
    token = r.json()["access_token"]
    return {"Authorization": f"Bearer {token}"}
