from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from hotdesk.core.repositories.assignment_repository import AssignmentRepository
from hotdesk.core.repositories.booking_repository import BookingRepository
from hotdesk.core.repositories.floor_repository import FloorRepository
from hotdesk.core.repositories.offering_repository import OfferingRepository
from hotdesk.core.repositories.user_repository import UserRepository
from hotdesk.core.repositories.workspace_repository import WorkspaceRepository


class Closable(Protocol):
    def close(self) -> None:
        ...


@dataclass(frozen=True, slots=True)
class DataStore:
    """
    The capability set the engine runs against. Each storage binding
    (relational, in-memory) provides one instance.
    """
    workspaces: WorkspaceRepository
    bookings: BookingRepository
    offerings: OfferingRepository
    floors: FloorRepository
    users: UserRepository
    assignments: AssignmentRepository
    closable: Closable

    def close(self) -> None:
        self.closable.close()
