from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

import structlog

from hotdesk.core.entities.interval import as_utc
from hotdesk.core.repositories.data_store import DataStore

logger = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class ReapResult:
    bookings: int
    offerings: int
    assignments: int
    workspaces: int
    floors: int


class ReapExpiredUseCase:
    """
    One reaper tick.

    Every step is driven by a fresh query, so a tick that fails half way is
    finished by the next one. Deletion order follows the foreign keys:
    bookings, offerings, assignments, workspaces, floors.
    """

    def __init__(self, *, store: DataStore) -> None:
        self._store = store

    def execute(self, *, now: datetime) -> ReapResult:
        now = as_utc(now)

        bookings = [b.id for b in self._store.bookings.expired(now)]
        offerings = [o.id for o in self._store.offerings.expired(now)]
        assignments = [a.id for a in self._store.assignments.expired(now)]
        workspaces = [w.id for w in self._store.workspaces.deleted()]
        floors = [f.id for f in self._store.floors.deleted()]

        if bookings:
            self._store.bookings.delete(bookings)
        if offerings:
            self._store.offerings.delete(offerings)
        if assignments:
            self._store.assignments.delete(assignments)
        if workspaces:
            self._store.workspaces.delete(workspaces)
        if floors:
            self._store.floors.delete(floors)

        result = ReapResult(
            bookings=len(bookings),
            offerings=len(offerings),
            assignments=len(assignments),
            workspaces=len(workspaces),
            floors=len(floors),
        )
        logger.info(
            "reaper_tick",
            now=now.isoformat(),
            bookings=result.bookings,
            offerings=result.offerings,
            assignments=result.assignments,
            workspaces=result.workspaces,
            floors=result.floors,
        )
        return result
