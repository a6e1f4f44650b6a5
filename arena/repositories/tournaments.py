"""Tournament repository, including the atomic spot operations."""
from __future__ import annotations

import logging
from typing import Any, Optional

from arena.errors import TournamentFull, TournamentNotFound
from arena.models import Region, Tournament, TournamentCreate, local_id, parse_iso
from arena.repositories.base import Repository

logger = logging.getLogger("arena.store.tournaments")


def _date_key(t: Tournament) -> float:
    dt = parse_iso(t.tournament_date)
    return dt.timestamp() if dt else float("inf")


class TournamentRepository(Repository[Tournament]):
    document = "tournaments"
    model = Tournament

    async def list(self, region: Optional[Region] = None) -> list[Tournament]:
        tournaments = await super().list()
        if region is not None:
            tournaments = [t for t in tournaments if t.region == region]
        return tournaments

    async def list_by_game(
        self,
        game_id: str,
        region: Optional[Region] = None,
        game_mode_id: Optional[str] = None,
        special: bool = False,
    ) -> list[Tournament]:
        """Tournaments for one game, soonest first. Special and regular are listed separately."""
        result = [
            t for t in await self.list(region)
            if t.game_id == game_id and t.is_special == special
        ]
        if game_mode_id:
            result = [t for t in result if t.game_mode_id == game_mode_id]
        return sorted(result, key=_date_key)

    async def create(self, data: TournamentCreate) -> Tournament:
        tournament = Tournament.model_validate({
            **data.model_dump(mode="json"),
            "id": local_id("local"),
            "spots_left": data.total_spots,
        })

        def insert(rows: list[dict]):
            rows.append(tournament.to_doc())

        await self._mutate(insert)
        logger.info("Created tournament %s (%s, %s)", tournament.id, tournament.name, tournament.region.value)
        return tournament

    async def update(self, tournament_id: str, changes: dict[str, Any]) -> Optional[Tournament]:
        """Admin edit. Changing total spots keeps the number of taken spots."""
        changes = {k: v for k, v in changes.items() if k not in ("id", "game_id")}

        def apply(rows: list[dict]):
            i = self._index(rows, tournament_id)
            if i < 0:
                return None
            original = self._parse(rows[i])
            patch = dict(changes)
            new_total = patch.get("total_spots")
            if new_total is not None and new_total != original.total_spots:
                patch["spots_left"] = min(new_total, max(0, new_total - original.spots_filled))
            rows[i] = self._merge(rows[i], patch).to_doc()
            return rows[i]

        row = await self._mutate(apply)
        if row is None:
            logger.warning("Tournament %s not found for update", tournament_id)
            return None
        return self._parse(row)

    async def reserve_spot(self, tournament_id: str) -> Tournament:
        """Take one spot: decrement ``spots_left`` only if it is positive.

        Check and decrement happen under the document lock, so concurrent
        callers can't oversell the last spot.
        """

        def take(rows: list[dict]):
            i = self._index(rows, tournament_id)
            if i < 0:
                raise TournamentNotFound()
            tournament = self._parse(rows[i])
            if tournament.spots_left <= 0:
                raise TournamentFull()
            tournament.spots_left -= 1
            rows[i] = tournament.to_doc()
            return rows[i]

        return self._parse(await self._mutate(take))

    async def release_spot(self, tournament_id: str) -> Tournament:
        """Give one spot back, never above ``total_spots``."""

        def give(rows: list[dict]):
            i = self._index(rows, tournament_id)
            if i < 0:
                raise TournamentNotFound()
            tournament = self._parse(rows[i])
            if tournament.spots_left < tournament.total_spots:
                tournament.spots_left += 1
                rows[i] = tournament.to_doc()
            else:
                logger.warning("Tournament %s already at capacity; spot not released", tournament_id)
            return rows[i]

        return self._parse(await self._mutate(give))
