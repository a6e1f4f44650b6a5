"""Game catalog: games, their modes and daily tournament templates."""
from __future__ import annotations

import re
from typing import Optional

from pydantic import Field, field_validator

from arena.models.base import Record

DEFAULT_GAME_IMAGE = "https://placehold.co/300x200.png"
DEFAULT_GAME_BANNER = "https://placehold.co/1200x400.png"

_TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


class GameMode(Record):
    id: str
    name: str
    description: Optional[str] = None
    icon_image_url: Optional[str] = None
    banner_image_url: Optional[str] = None


class DailyTournamentTemplate(Record):
    """Recipe for a tournament that runs every day at ``tournament_time``."""

    id: str
    template_name: str
    game_mode_id: str
    entry_fee: float = Field(default=0, ge=0)
    prize_pool: str = ""
    image_url: Optional[str] = None
    total_spots: int = Field(ge=1)
    tournament_time: str  # HH:MM
    registration_close_offset_hours: float = Field(default=1, ge=0)

    @field_validator("tournament_time")
    @classmethod
    def _time(cls, v: str) -> str:
        if not _TIME_RE.match(v or ""):
            raise ValueError("tournamentTime must be HH:MM")
        return v

    @property
    def hour_minute(self) -> tuple[int, int]:
        hours, minutes = self.tournament_time.split(":")
        return int(hours), int(minutes)


class Game(Record):
    id: str
    name: str
    description: str = ""
    icon_image_url: Optional[str] = None
    image_url: str = DEFAULT_GAME_IMAGE
    banner_image_url: str = DEFAULT_GAME_BANNER
    theme_gradient: str = "from-gray-500 to-gray-600"
    game_modes: list[GameMode] = Field(default_factory=list)
    daily_tournament_templates: list[DailyTournamentTemplate] = Field(default_factory=list)

    def template(self, template_id: str) -> Optional[DailyTournamentTemplate]:
        return next((t for t in self.daily_tournament_templates if t.id == template_id), None)


class GameCreate(Record):
    id: str = Field(pattern=r"^[a-z0-9][a-z0-9-]*$", max_length=64)
    name: str = Field(min_length=1, max_length=128)
    description: str = ""
    icon_image_url: Optional[str] = None
    image_url: Optional[str] = None
    banner_image_url: Optional[str] = None
    theme_gradient: Optional[str] = None
    game_modes: list[GameMode] = Field(default_factory=list)


class GameUpdate(Record):
    name: Optional[str] = Field(default=None, min_length=1, max_length=128)
    description: Optional[str] = None
    icon_image_url: Optional[str] = None
    image_url: Optional[str] = None
    banner_image_url: Optional[str] = None
    theme_gradient: Optional[str] = None
    game_modes: Optional[list[GameMode]] = None
    daily_tournament_templates: Optional[list[DailyTournamentTemplate]] = None


def _modes(prefix: str, rows: list[tuple[str, str, str]]) -> list[dict]:
    return [
        {
            "id": mode_id,
            "name": name,
            "description": description,
            "iconImageUrl": f"https://placehold.co/40x40.png?text={prefix}",
            "bannerImageUrl": f"https://placehold.co/300x160.png?text={name.replace(' ', '+')}",
        }
        for mode_id, name, description in rows
    ]


SEED_GAMES: list[dict] = [
    {
        "id": "minecraft",
        "name": "Minecraft",
        "description": "Build, mine, and explore infinite worlds of blocks and adventure.",
        "iconImageUrl": "https://placehold.co/100x100.png?text=M",
        "themeGradient": "from-green-500 to-emerald-600",
        "gameModes": _modes("MC", [
            ("survival", "Survival", "Gather resources, build, and survive."),
            ("creative", "Creative", "Unlimited resources to build anything."),
            ("bed-wars", "Bed Wars", "Protect your bed and destroy others."),
        ]),
        "dailyTournamentTemplates": [],
    },
    {
        "id": "free-fire",
        "name": "Free Fire",
        "description": "Experience the ultimate survival shooter on mobile. Be the last one standing!",
        "iconImageUrl": "https://placehold.co/100x100.png?text=F",
        "themeGradient": "from-orange-500 to-red-600",
        "gameModes": _modes("FF", [
            ("cs-1v1", "Clash Squad 1v1", "Intense 1v1 battles in a small zone."),
            ("cs-2v2", "Clash Squad 2v2", "Team up for 2v2 tactical combat."),
            ("cs-4v4", "Clash Squad 4v4", "Classic 4v4 squad-based rounds."),
            ("fm-solo", "Full Map Solo", "Survive alone on the vast island."),
            ("fm-duo", "Full Map Duo", "Partner up and fight for victory."),
            ("fm-squad", "Full Map Squad", "Coordinate with your squad to win."),
            ("lw-1v1", "Lone Wolf 1v1", "Fast-paced 1v1 duels with preset loadouts."),
            ("lw-2v2", "Lone Wolf 2v2", "2v2 action with preset weapon choices."),
        ]),
        "dailyTournamentTemplates": [],
    },
]
