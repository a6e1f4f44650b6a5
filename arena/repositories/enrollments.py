"""Enrollment repository."""
from __future__ import annotations

import logging

from arena.errors import AlreadyEnrolled
from arena.models import Enrollment, EnrollmentCreate, local_id, utcnow_iso
from arena.repositories.base import Repository

logger = logging.getLogger("arena.store.enrollments")


class EnrollmentRepository(Repository[Enrollment]):
    document = "enrollments"
    model = Enrollment

    async def list_by_tournament(self, tournament_id: str) -> list[Enrollment]:
        return [e for e in await self.list() if e.tournament_id == tournament_id]

    async def list_by_user(self, user_id: str) -> list[Enrollment]:
        return [e for e in await self.list() if e.user_id == user_id]

    async def exists(self, user_id: str, tournament_id: str) -> bool:
        return any(
            r.get("userId") == user_id and r.get("tournamentId") == tournament_id
            for r in await self._rows()
        )

    async def create(self, data: EnrollmentCreate) -> Enrollment:
        """Insert an enrollment; at most one per (user, tournament).

        The duplicate check runs inside the same locked read-modify-write as
        the insert.
        """
        enrollment = Enrollment(
            id=local_id("enrollment"),
            enrollment_date=utcnow_iso(),
            **data.model_dump(),
        )

        def insert(rows: list[dict]):
            if any(
                r.get("userId") == data.user_id and r.get("tournamentId") == data.tournament_id
                for r in rows
            ):
                raise AlreadyEnrolled()
            rows.append(enrollment.to_doc())

        await self._mutate(insert)
        return enrollment

    async def delete(self, enrollment_id: str) -> bool:
        def remove(rows: list[dict]):
            i = self._index(rows, enrollment_id)
            if i < 0:
                return False
            del rows[i]
            return True

        removed = await self._mutate(remove)
        if removed:
            logger.info("Deleted enrollment %s", enrollment_id)
        return removed
