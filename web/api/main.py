"""FastAPI tournament API - catalog, enrollment, wallet and admin endpoints."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import config
from arena.errors import ArenaError
from arena.repositories import get_repositories
from arena.store import get_store

from web.api.admin_routes import router as admin_router
from web.api.auth_routes import router as auth_router
from web.api.payment_routes import router as payment_router
from web.api.routes import router as api_router
from web.auth import hash_password

logger = logging.getLogger("arena.api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    store = get_store()
    await store.init()
    repos = get_repositories(store)
    if config.SEED_DEFAULTS:
        await repos.games.seed()
        await repos.qr_codes.seed()
    if config.ADMIN_PASSWORD:
        await repos.users.ensure_admin(hash_password(config.ADMIN_PASSWORD))
    logger.info("Store ready (%s)", type(store).__name__)
    yield
    await store.close()


app = FastAPI(title="Arena Clash API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(api_router)
app.include_router(auth_router)
app.include_router(payment_router)
app.include_router(admin_router)


@app.exception_handler(ArenaError)
async def arena_error_handler(request: Request, exc: ArenaError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message, "code": exc.code})


@app.get("/api/health")
async def health():
    return {"status": "ok"}
