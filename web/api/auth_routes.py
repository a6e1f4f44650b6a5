"""Auth API routes: signup, login, current user."""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from arena.models import Region, User, UserCreate
from arena.repositories import get_repositories
from web.auth import authenticate, create_access_token, hash_password, require_user

logger = logging.getLogger("arena.api")

router = APIRouter(prefix="/api/auth", tags=["auth"])


class SignupRequest(BaseModel):
    email: str = Field(min_length=3, max_length=254, pattern=r"^[^@\s]+@[^@\s]+$")
    password: str = Field(min_length=6, max_length=256)
    display_name: Optional[str] = Field(default=None, max_length=64)
    region: Region = Region.USA


class LoginRequest(BaseModel):
    email: str
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: dict


class ProfileUpdate(BaseModel):
    display_name: Optional[str] = Field(default=None, min_length=1, max_length=64)
    photo_url: Optional[str] = None
    region: Optional[Region] = None


@router.post("/signup", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def signup(body: SignupRequest):
    """Register a new account and return a JWT for it."""
    user = await get_repositories().users.create(UserCreate(
        email=body.email,
        password_hash=hash_password(body.password),
        display_name=body.display_name,
        region=body.region,
    ))
    return TokenResponse(access_token=create_access_token(user.uid), user=user.public())


@router.post("/login", response_model=TokenResponse)
async def login(body: LoginRequest):
    """Authenticate and return JWT."""
    user = await authenticate(body.email, body.password)
    if not user:
        logger.info("Failed login for %s", body.email)
        raise HTTPException(status_code=401, detail="Invalid email or password")
    return TokenResponse(access_token=create_access_token(user.uid), user=user.public())


@router.get("/me")
async def get_me(user: User = Depends(require_user)):
    """Get current authenticated user."""
    return user.public()


@router.patch("/me")
async def update_me(body: ProfileUpdate, user: User = Depends(require_user)):
    """Update display name, avatar or region."""
    changes = body.model_dump(exclude_unset=True, exclude_none=True)
    if not changes:
        return user.public()
    updated = await get_repositories().users.update(user.uid, changes)
    if updated is None:
        raise HTTPException(404, "User not found")
    return updated.public()
