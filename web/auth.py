"""Player and admin authentication.

Tokens are HS256 JWTs whose subject is the player's 9-digit uid. There are no
stored roles: a player is an admin when their email is ``config.ADMIN_EMAIL``
(see ``User.is_admin``).
"""
from __future__ import annotations

import hashlib
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from passlib.context import CryptContext

import config
from arena.models import User
from arena.repositories import get_repositories

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
http_bearer = HTTPBearer(auto_error=False)

BCRYPT_MAX_BYTES = 72


def _prepare_password(password: str) -> str:
    encoded = password.encode("utf-8")
    if len(encoded) > BCRYPT_MAX_BYTES:
        return hashlib.sha256(encoded).hexdigest()
    return password


def hash_password(password: str) -> str:
    return pwd_context.hash(_prepare_password(password))


def verify_password(plain: str, hashed: str) -> bool:
    """False for accounts without a password hash (never signed up)."""
    if not hashed:
        return False
    return pwd_context.verify(_prepare_password(plain), hashed)


async def authenticate(email: str, password: str) -> Optional[User]:
    """Look the player up by email (case-insensitive) and check the password."""
    user = await get_repositories().users.get_by_email(email)
    if user is None or not verify_password(password, user.password_hash):
        return None
    return user


def create_access_token(uid: str) -> str:
    expire = datetime.now(timezone.utc) + timedelta(days=config.JWT_EXPIRE_DAYS)
    return jwt.encode({"sub": uid, "exp": expire}, config.JWT_SECRET, algorithm=config.JWT_ALGORITHM)


def decode_token(token: str) -> Optional[dict]:
    try:
        return jwt.decode(token, config.JWT_SECRET, algorithms=[config.JWT_ALGORITHM])
    except jwt.InvalidTokenError:
        return None


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(http_bearer),
    x_auth_token: Optional[str] = Header(None, alias="X-Auth-Token"),
) -> Optional[User]:
    """Player behind the Bearer or X-Auth-Token header; None when anonymous."""
    token = credentials.credentials if credentials and credentials.credentials else x_auth_token
    payload = decode_token(token) if token else None
    uid = payload.get("sub") if payload else None
    if not uid:
        return None
    return await get_repositories().users.get_by_id(str(uid))


async def require_user(
    user: Optional[User] = Depends(get_current_user),
) -> User:
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


async def require_admin_user(
    user: User = Depends(require_user),
) -> User:
    if not user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return user
