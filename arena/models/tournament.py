"""Tournament model."""
from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import Field, field_validator, model_validator

from arena.models.base import Record, Region, normalize_region

DEFAULT_TOURNAMENT_IMAGE = "https://placehold.co/400x250.png"

Currency = Literal["USD", "INR"]


class Tournament(Record):
    """Tournament in one region with a fixed number of spots."""

    id: str
    game_id: str
    game_mode_id: str = "default"
    name: str
    tournament_date: str  # ISO; kept as text so bad stored dates don't break reads
    registration_close_date: str
    entry_fee: float = Field(default=0, ge=0)
    entry_fee_currency: Currency = "USD"
    prize_pool: str = ""
    image_url: str = DEFAULT_TOURNAMENT_IMAGE
    total_spots: int = Field(ge=0)
    spots_left: int = Field(ge=0)
    region: Region = Region.USA
    is_special: bool = False

    @field_validator("region", mode="before")
    @classmethod
    def _region(cls, v):
        return normalize_region(v)

    @field_validator("game_mode_id", mode="before")
    @classmethod
    def _mode(cls, v):
        return v or "default"

    @field_validator("image_url", mode="before")
    @classmethod
    def _image(cls, v):
        return v or DEFAULT_TOURNAMENT_IMAGE

    @model_validator(mode="after")
    def _spots_within_capacity(self):
        if self.spots_left > self.total_spots:
            raise ValueError("spotsLeft cannot exceed totalSpots")
        return self

    @property
    def spots_filled(self) -> int:
        return self.total_spots - self.spots_left


class TournamentCreate(Record):
    game_id: str
    game_mode_id: str = "default"
    name: str = Field(min_length=1, max_length=200)
    tournament_date: datetime
    registration_close_date: datetime
    entry_fee: float = Field(default=0, ge=0)
    entry_fee_currency: Currency = "USD"
    prize_pool: str = ""
    image_url: Optional[str] = None
    total_spots: int = Field(ge=1)
    region: Region = Region.USA
    is_special: bool = False


class TournamentUpdate(Record):
    """Partial admin edit. ``id`` and ``game_id`` cannot change."""

    game_mode_id: Optional[str] = None
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    tournament_date: Optional[datetime] = None
    registration_close_date: Optional[datetime] = None
    entry_fee: Optional[float] = Field(default=None, ge=0)
    entry_fee_currency: Optional[Currency] = None
    prize_pool: Optional[str] = None
    image_url: Optional[str] = None
    total_spots: Optional[int] = Field(default=None, ge=0)
    region: Optional[Region] = None
    is_special: Optional[bool] = None
