"""Configuration for the Arena Clash API."""
from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

_ROOT = Path(__file__).parent

# Document store: "file" (one JSON file per collection) or "sql" (documents table)
STORE_BACKEND = os.getenv("STORE_BACKEND", "file").strip().lower()
DATA_DIR = Path(os.getenv("DATA_DIR", str(_ROOT / ".data")))
DATABASE_URL = os.getenv(
    "DATABASE_URL",
    f"sqlite+aiosqlite:///{_ROOT / 'arena.db'}",
)
# Seconds a cached document stays fresh; 0 re-reads on every call
STORE_CACHE_TTL = float(os.getenv("STORE_CACHE_TTL", "0") or 0)

# Seed games and QR code mappings into empty documents on startup
SEED_DEFAULTS = os.getenv("SEED_DEFAULTS", "true").lower() in ("1", "true", "yes")


def _parse_origins(value: str) -> list[str]:
    if not value:
        return ["*"]
    return [x.strip() for x in value.split(",") if x.strip()]


CORS_ORIGINS = _parse_origins(os.getenv("CORS_ORIGINS", "*"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Admin account: the reserved email is what makes a user an admin
ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@example.com").strip().lower()
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "")  # Set to bootstrap the admin account
ADMIN_DISPLAY_NAME = os.getenv("ADMIN_DISPLAY_NAME", "Arena Admin")

# Web auth
JWT_SECRET = os.getenv("JWT_SECRET", "change-me-in-production-use-long-random-string")
JWT_ALGORITHM = "HS256"
JWT_EXPIRE_DAYS = int(os.getenv("JWT_EXPIRE_DAYS", "7"))

# API server (web/run_api.py)
API_HOST = os.getenv("API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("API_PORT", "8000"))
API_RELOAD = os.getenv("API_RELOAD", "false").lower() in ("1", "true", "yes")
