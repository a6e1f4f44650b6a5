"""Record base class, shared enums and id helpers."""
from __future__ import annotations

import random
import string
import time
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class Region(str, Enum):
    USA = "USA"
    INDIA = "INDIA"


def normalize_region(value: Any) -> Region:
    """Unknown or missing regions fall back to USA."""
    if isinstance(value, Region):
        return value
    try:
        return Region(str(value).upper())
    except ValueError:
        return Region.USA


def currency_for_region(region: Region) -> str:
    return "INR" if region == Region.INDIA else "USD"


class Record(BaseModel):
    """Stored record: snake_case in Python, camelCase in the JSON documents."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_doc(self) -> dict:
        """Serialize for storage / API responses."""
        return self.model_dump(by_alias=True, mode="json")


def local_id(prefix: str) -> str:
    """``<prefix>-<epoch ms>-<7 random chars>``."""
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=7))
    return f"{prefix}-{int(time.time() * 1000)}-{suffix}"


def utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def parse_iso(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO datetime string to an aware UTC datetime; None if unparseable."""
    if not value or not isinstance(value, str):
        return None
    try:
        dt = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt
