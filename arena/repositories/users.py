"""User repository."""
from __future__ import annotations

import logging
import random
import time
from typing import Any, Callable, Optional, TypeVar

import config
from arena.errors import EmailAlreadyRegistered, InvalidWallet, UserNotFound
from arena.models import Region, User, UserCreate, Wallet
from arena.repositories.base import Repository

logger = logging.getLogger("arena.store.users")

R = TypeVar("R")

# Fields that never change after registration
_IMMUTABLE = ("uid", "email", "created_at", "password_hash")


def _new_uid(existing: set[str]) -> str:
    """Random 9-digit id whose first digit is 1-9."""
    for _ in range(1000):
        uid = f"{random.randint(1, 9)}{random.randint(0, 99_999_999):08d}"
        if uid not in existing:
            return uid
    raise RuntimeError("Could not allocate a unique user id")


def _avatar_url(name: str) -> str:
    compact = "".join(name.split())
    return f"https://avatar.vercel.sh/{compact}?size=100&text={name[:1].upper()}"


class UserRepository(Repository[User]):
    document = "users"
    model = User
    key = "uid"

    async def list(self, region: Optional[Region] = None) -> list[User]:
        users = await super().list()
        if region is not None:
            users = [u for u in users if u.region == region]
        return users

    async def get_by_email(self, email: str) -> Optional[User]:
        wanted = email.strip().lower()
        for row in await self._rows():
            if str(row.get("email", "")).lower() == wanted:
                return self._parse(row)
        return None

    async def create(self, data: UserCreate) -> User:
        email = data.email.strip().lower()
        display_name = (data.display_name or "").strip() or email.split("@")[0]

        def insert(rows: list[dict]):
            if any(str(r.get("email", "")).lower() == email for r in rows):
                raise EmailAlreadyRegistered()
            user = User(
                uid=_new_uid({r.get("uid") for r in rows}),
                email=email,
                password_hash=data.password_hash,
                display_name=display_name,
                photo_url=data.photo_url or _avatar_url(display_name),
                created_at=int(time.time() * 1000),
                wallet_balance=Wallet(),
                region=data.region,
            )
            rows.append(user.to_doc())
            return rows[-1]

        user = self._parse(await self._mutate(insert))
        logger.info("Registered user %s (%s)", user.uid, user.email)
        return user

    async def update(self, uid: str, changes: dict[str, Any]) -> Optional[User]:
        """Profile/wallet update. Wallet components are merged individually."""
        changes = {k: v for k, v in changes.items() if k not in _IMMUTABLE}
        wallet_changes = changes.pop("wallet_balance", None)

        def apply(rows: list[dict]):
            i = self._index(rows, uid)
            if i < 0:
                return None
            patch = dict(changes)
            if wallet_changes is not None:
                current = self._parse(rows[i]).wallet_balance.model_dump()
                if isinstance(wallet_changes, Wallet):
                    current.update(wallet_changes.model_dump())
                else:
                    current.update({k: v for k, v in wallet_changes.items() if k in ("winnings", "credits")})
                wallet = Wallet.model_validate(current)
                if not wallet.is_valid():
                    raise InvalidWallet()
                patch["wallet_balance"] = wallet
            rows[i] = self._merge(rows[i], patch).to_doc()
            return rows[i]

        row = await self._mutate(apply)
        if row is None:
            logger.warning("User %s not found for update", uid)
            return None
        return self._parse(row)

    async def update_wallet(self, uid: str, fn: Callable[[Wallet], tuple[Wallet, R]]) -> tuple[User, R]:
        """Atomically replace the wallet with ``fn(current)[0]``.

        ``fn`` sees the stored wallet under the document lock, so debits and
        credits computed from it can't be lost to a concurrent write. Returns
        the updated user and ``fn``'s second value.
        """

        def apply(rows: list[dict]):
            i = self._index(rows, uid)
            if i < 0:
                raise UserNotFound()
            user = self._parse(rows[i])
            wallet, result = fn(user.wallet_balance.model_copy())
            if not wallet.is_valid():
                raise InvalidWallet()
            user.wallet_balance = wallet
            rows[i] = user.to_doc()
            return rows[i], result

        row, result = await self._mutate(apply)
        return self._parse(row), result

    async def set_wallet(self, uid: str, wallet: Wallet) -> User:
        """Overwrite both wallet components."""
        user, _ = await self.update_wallet(uid, lambda _current: (wallet, None))
        return user

    async def ensure_admin(self, password_hash: str) -> Optional[User]:
        """Create the admin account (``config.ADMIN_EMAIL``) if it doesn't exist yet."""
        existing = await self.get_by_email(config.ADMIN_EMAIL)
        if existing:
            return existing
        try:
            user = await self.create(UserCreate(
                email=config.ADMIN_EMAIL,
                password_hash=password_hash,
                display_name=config.ADMIN_DISPLAY_NAME,
                region=Region.USA,
            ))
        except EmailAlreadyRegistered:
            return await self.get_by_email(config.ADMIN_EMAIL)
        logger.info("Admin user %s created with uid %s", user.email, user.uid)
        return user
