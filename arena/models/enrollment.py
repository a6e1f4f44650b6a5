"""Enrollment model - user enrolled in a tournament."""
from __future__ import annotations

from pydantic import Field, field_validator

from arena.models.base import Record

IN_GAME_NAME_MIN = 3
IN_GAME_NAME_MAX = 50


class Enrollment(Record):
    """One user's seat in one tournament. Names are copied for display."""

    id: str
    tournament_id: str
    tournament_name: str
    game_id: str
    user_id: str
    user_email: str
    in_game_name: str
    enrollment_date: str


class EnrollmentCreate(Record):
    tournament_id: str
    tournament_name: str
    game_id: str
    user_id: str
    user_email: str
    in_game_name: str = Field(min_length=IN_GAME_NAME_MIN, max_length=IN_GAME_NAME_MAX)

    @field_validator("in_game_name", mode="before")
    @classmethod
    def _strip(cls, v):
        return v.strip() if isinstance(v, str) else v
