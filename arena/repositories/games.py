"""Game catalog repository."""
from __future__ import annotations

import logging

from arena.errors import DuplicateGame
from arena.models import Game, GameCreate
from arena.models.game import SEED_GAMES
from arena.repositories.base import Repository

logger = logging.getLogger("arena.store.games")


class GameRepository(Repository[Game]):
    document = "games"
    model = Game

    async def seed(self) -> bool:
        """Fill an empty catalog with the default games. Returns whether it seeded."""

        def fill(rows: list[dict]):
            if rows:
                return False
            rows.extend(Game.model_validate(g).to_doc() for g in SEED_GAMES)
            return True

        seeded = await self._mutate(fill)
        if seeded:
            logger.info("Games document empty; seeded %d default games", len(SEED_GAMES))
        return seeded

    async def create(self, data: GameCreate) -> Game:
        values = {k: v for k, v in data.model_dump().items() if v is not None}
        if not values.get("icon_image_url"):
            values["icon_image_url"] = f"https://placehold.co/100x100.png?text={data.name[:1]}"
        game = Game.model_validate(values)

        def insert(rows: list[dict]):
            if self._index(rows, game.id) >= 0:
                raise DuplicateGame()
            rows.append(game.to_doc())

        await self._mutate(insert)
        logger.info("Created game %s", game.id)
        return game
