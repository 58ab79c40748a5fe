"""
In-memory binding of the DataStore, used by the engine tests.

Records are copied on the way in and out so callers can never mutate stored
state without going through update().
"""
from __future__ import annotations

import copy
import threading
from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any

from hotdesk.core.availability import available_workspace_ids, is_covered
from hotdesk.core.deadline import check_deadline
from hotdesk.core.entities.assignment import Assignment
from hotdesk.core.entities.booking import Booking, ExpandedBooking
from hotdesk.core.entities.floor import Floor
from hotdesk.core.entities.offering import ExpandedOffering, Offering
from hotdesk.core.entities.user import User, UserAssignment
from hotdesk.core.entities.workspace import Workspace
from hotdesk.core.errors import EmptyError, InvalidOperationError, NotFoundError, StorageFault
from hotdesk.core.repositories.assignment_repository import AssignmentRepository
from hotdesk.core.repositories.booking_repository import BookingRepository
from hotdesk.core.repositories.data_store import DataStore
from hotdesk.core.repositories.floor_repository import FloorRepository
from hotdesk.core.repositories.offering_repository import OfferingRepository
from hotdesk.core.repositories.user_repository import UserRepository
from hotdesk.core.repositories.workspace_repository import WorkspaceRepository
from hotdesk.infrastructure.repositories.base import new_id, utcnow


@dataclass
class _Tables:
    lock: threading.RLock = field(default_factory=threading.RLock)
    floors: dict[str, Floor] = field(default_factory=dict)
    workspaces: dict[str, Workspace] = field(default_factory=dict)
    users: dict[str, User] = field(default_factory=dict)
    assignments: dict[str, Assignment] = field(default_factory=dict)
    bookings: dict[str, Booking] = field(default_factory=dict)
    offerings: dict[str, Offering] = field(default_factory=dict)

    def drop_workspaces(self, workspace_ids: set[str]) -> None:
        for table in (self.bookings, self.offerings, self.assignments):
            for record_id in [k for k, v in table.items() if v.workspace_id in workspace_ids]:
                del table[record_id]
        for ws_id in workspace_ids:
            self.workspaces.pop(ws_id, None)


class _MemoryRepository:
    def __init__(self, tables: _Tables) -> None:
        self._t = tables

    @staticmethod
    def _insert(table: dict, stored) -> None:
        # Same outcome as the SQL primary key: a taken id is a storage failure
        check_deadline("insert")
        if stored.id in table:
            raise StorageFault(f"Duplicate key {stored.id!r}")
        table[stored.id] = stored


class MemoryFloorRepository(_MemoryRepository, FloorRepository):
    def _live(self, floor_id: str) -> Floor:
        floor = self._t.floors.get(floor_id)
        if floor is None or floor.is_deleted:
            raise NotFoundError(f"Floor {floor_id!r} not found")
        return floor

    def get_one(self, floor_id: str) -> Floor:
        with self._t.lock:
            return replace(self._live(floor_id))

    def get_all(self) -> list[Floor]:
        with self._t.lock:
            floors = [replace(f) for f in self._t.floors.values() if not f.is_deleted]
        return sorted(floors, key=lambda f: f.name)

    def get_all_ids(self) -> list[str]:
        return [f.id for f in self.get_all()]

    def create(self, floor: Floor) -> str:
        stored = replace(floor, id=floor.id or new_id(), deleted_at=None)
        with self._t.lock:
            self._insert(self._t.floors, stored)
        return stored.id

    def update(self, floor_id: str, floor: Floor) -> None:
        with self._t.lock:
            current = self._live(floor_id)
            self._t.floors[floor_id] = replace(floor, id=floor_id, deleted_at=current.deleted_at)

    def remove(self, floor_id: str, *, force: bool = False) -> None:
        with self._t.lock:
            floor = self._live(floor_id)
            live = [w for w in self._t.workspaces.values() if w.floor_id == floor_id and not w.is_deleted]
            if live and not force:
                raise InvalidOperationError(
                    f"invalid operation: floor {floor_id!r} still has {len(live)} workspace(s)"
                )
            now = utcnow()
            for workspace in live:
                workspace.deleted_at = now
            floor.deleted_at = now

    def deleted(self) -> list[Floor]:
        with self._t.lock:
            return [replace(f) for f in self._t.floors.values() if f.is_deleted]

    def delete(self, floor_ids: Iterable[str]) -> None:
        ids = set(floor_ids)
        with self._t.lock:
            self._t.drop_workspaces({w.id for w in self._t.workspaces.values() if w.floor_id in ids})
            for floor_id in ids:
                self._t.floors.pop(floor_id, None)


class MemoryWorkspaceRepository(_MemoryRepository, WorkspaceRepository):
    def _live(self, workspace_id: str) -> Workspace:
        workspace = self._t.workspaces.get(workspace_id)
        if workspace is None or workspace.is_deleted:
            raise NotFoundError(f"Workspace {workspace_id!r} not found")
        return workspace

    def get_one(self, workspace_id: str) -> Workspace:
        with self._t.lock:
            return copy.deepcopy(self._live(workspace_id))

    def get_all(self) -> list[Workspace]:
        with self._t.lock:
            workspaces = [copy.deepcopy(w) for w in self._t.workspaces.values() if not w.is_deleted]
        return sorted(workspaces, key=lambda w: w.name)

    def exists(self, workspace_id: str) -> bool:
        with self._t.lock:
            return workspace_id in self._t.workspaces

    def create(self, workspace: Workspace) -> str:
        stored = copy.deepcopy(workspace)
        stored.id = workspace.id or new_id()
        stored.deleted_at = None
        with self._t.lock:
            self._insert(self._t.workspaces, stored)
        return stored.id

    def upsert(self, workspace: Workspace) -> str:
        if not workspace.id:
            return self.create(workspace)
        with self._t.lock:
            current = self._t.workspaces.get(workspace.id)
            stored = copy.deepcopy(workspace)
            stored.deleted_at = current.deleted_at if current else None
            self._t.workspaces[workspace.id] = stored
        return workspace.id

    def update(self, workspace_id: str, workspace: Workspace) -> None:
        with self._t.lock:
            self._live(workspace_id)
            stored = copy.deepcopy(workspace)
            stored.id = workspace_id
            self._t.workspaces[workspace_id] = stored

    def update_properties(self, workspace_id: str, properties: dict[str, Any]) -> None:
        with self._t.lock:
            self._live(workspace_id).properties = copy.deepcopy(properties)

    def remove(self, workspace_id: str) -> None:
        with self._t.lock:
            self._live(workspace_id).deleted_at = utcnow()

    def by_floor(self, floor_id: str) -> list[Workspace]:
        return [w for w in self.get_all() if w.floor_id == floor_id]

    def count_by_floor(self, floor_id: str) -> int:
        return len(self.by_floor(floor_id))

    def available(
        self,
        floor_id: str,
        start: datetime,
        end: datetime,
        *,
        exclude_booking_id: str | None = None,
    ) -> list[str]:
        with self._t.lock:
            workspace_ids = [w.id for w in self.by_floor(floor_id)]
            ids = set(workspace_ids)
            bookings = [replace(b) for b in self._t.bookings.values() if b.workspace_id in ids]
            assignments = [replace(a) for a in self._t.assignments.values() if a.workspace_id in ids]
            offerings = [replace(o) for o in self._t.offerings.values() if o.workspace_id in ids]
        return available_workspace_ids(
            workspace_ids,
            start,
            end,
            bookings=bookings,
            assignments=assignments,
            offerings=offerings,
            exclude_booking_id=exclude_booking_id,
        )

    def deleted(self) -> list[Workspace]:
        with self._t.lock:
            return [copy.deepcopy(w) for w in self._t.workspaces.values() if w.is_deleted]

    def delete(self, workspace_ids: Iterable[str]) -> None:
        with self._t.lock:
            self._t.drop_workspaces(set(workspace_ids))


class _MemoryWindowRepository(_MemoryRepository):
    _kind: str

    def _table(self) -> dict:
        raise NotImplementedError

    def _expand(self, record, workspace_name, user_name, floor_id, floor_name):
        raise NotImplementedError

    def _row(self, record_id: str):
        record = self._table().get(record_id)
        if record is None:
            raise NotFoundError(f"{self._kind.capitalize()} {record_id!r} not found")
        return record

    def _list(self, predicate=lambda r: True) -> list:
        with self._t.lock:
            found = [replace(r) for r in self._table().values() if predicate(r)]
        return sorted(found, key=lambda r: r.start_time)

    def _expanded(self, records: list) -> list:
        expanded = []
        with self._t.lock:
            for record in records:
                workspace = self._t.workspaces.get(record.workspace_id)
                user = self._t.users.get(record.user_id)
                floor = self._t.floors.get(workspace.floor_id) if workspace else None
                # Same rows an inner join would drop
                if workspace is None or user is None or floor is None:
                    continue
                expanded.append(self._expand(record, workspace.name, user.name, floor.id, floor.name))
        return expanded

    def get_one(self, record_id: str):
        with self._t.lock:
            return replace(self._row(record_id))

    def get_one_expanded(self, record_id: str):
        found = self._expanded([self.get_one(record_id)])
        if not found:
            raise NotFoundError(f"{self._kind.capitalize()} {record_id!r} not found")
        return found[0]

    def get_all(self) -> list:
        return self._list()

    def get_all_expanded(self) -> list:
        return self._expanded(self.get_all())

    def by_workspace(self, workspace_id: str) -> list:
        return self._list(lambda r: r.workspace_id == workspace_id)

    def by_workspace_expanded(self, workspace_id: str) -> list:
        return self._expanded(self.by_workspace(workspace_id))

    def by_user(self, user_id: str) -> list:
        return self._list(lambda r: r.user_id == user_id)

    def by_user_expanded(self, user_id: str) -> list:
        return self._expanded(self.by_user(user_id))

    def by_range(self, start: datetime, end: datetime) -> list:
        return self._list(lambda r: r.overlaps(start, end))

    def by_range_expanded(self, start: datetime, end: datetime) -> list:
        return self._expanded(self.by_range(start, end))

    def _live_overlapping(self, workspace_id, start, end, *, user_id=None, exclude_id=None) -> list:
        return self._list(
            lambda r: r.workspace_id == workspace_id
            and not r.cancelled
            and r.overlaps(start, end)
            and (user_id is None or r.user_id == user_id)
            and (exclude_id is None or r.id != exclude_id)
        )

    def create(self, record) -> str:
        stored = replace(record, id=record.id or new_id())
        with self._t.lock:
            self._insert(self._table(), stored)
        return stored.id

    def update(self, record_id: str, record) -> None:
        with self._t.lock:
            current = self._row(record_id)
            check_deadline("update")
            self._table()[record_id] = replace(
                record, id=record_id, cancelled=current.cancelled or record.cancelled
            )

    def remove(self, record_id: str) -> None:
        with self._t.lock:
            self._row(record_id)
            del self._table()[record_id]

    def expired(self, since: datetime) -> list:
        return self._list(lambda r: r.end_time < since)

    def delete(self, record_ids: Iterable[str]) -> None:
        with self._t.lock:
            for record_id in record_ids:
                self._table().pop(record_id, None)


class MemoryBookingRepository(_MemoryWindowRepository, BookingRepository):
    _kind = "booking"

    def _table(self) -> dict[str, Booking]:
        return self._t.bookings

    def _expand(self, record, workspace_name, user_name, floor_id, floor_name) -> ExpandedBooking:
        return ExpandedBooking(record, workspace_name, user_name, floor_id, floor_name)

    def overlapping(self, workspace_id, start, end, *, exclude_id=None) -> list[Booking]:
        return self._live_overlapping(workspace_id, start, end, exclude_id=exclude_id)


class MemoryOfferingRepository(_MemoryWindowRepository, OfferingRepository):
    _kind = "offering"

    def _table(self) -> dict[str, Offering]:
        return self._t.offerings

    def _expand(self, record, workspace_name, user_name, floor_id, floor_name) -> ExpandedOffering:
        return ExpandedOffering(record, workspace_name, user_name, floor_id, floor_name)

    def by_workspace_and_range(self, workspace_id: str, start: datetime, end: datetime) -> Offering:
        found = self._list(
            lambda o: o.workspace_id == workspace_id
            and not o.cancelled
            and o.start_time <= start
            and o.end_time >= end
        )
        if not found:
            raise EmptyError(f"No offering on workspace {workspace_id!r} covers the requested window")
        return found[0]

    def overlapping_for_user(self, workspace_id, user_id, start, end, *, exclude_id=None) -> list[Offering]:
        return self._live_overlapping(workspace_id, start, end, user_id=user_id, exclude_id=exclude_id)


class MemoryUserRepository(_MemoryRepository, UserRepository):
    def get_one(self, user_id: str) -> User:
        with self._t.lock:
            user = self._t.users.get(user_id)
            if user is None:
                raise NotFoundError(f"User {user_id!r} not found")
            return replace(user)

    def get_all(self) -> list[User]:
        with self._t.lock:
            users = [replace(u) for u in self._t.users.values()]
        return sorted(users, key=lambda u: u.name)

    def create(self, user: User) -> str:
        stored = replace(user, id=user.id or new_id())
        with self._t.lock:
            self._insert(self._t.users, stored)
        return stored.id

    def update(self, user_id: str, user: User) -> None:
        with self._t.lock:
            self.get_one(user_id)
            self._t.users[user_id] = replace(user, id=user_id)

    def _assigned(self, predicate) -> list[UserAssignment]:
        with self._t.lock:
            views = [
                UserAssignment(
                    user_id=user.id,
                    name=user.name,
                    email=user.email,
                    department=user.department,
                    is_admin=user.is_admin,
                    assignment_id=a.id,
                    workspace_id=a.workspace_id,
                    start_time=a.start_time,
                    end_time=a.end_time,
                )
                for a in self._t.assignments.values()
                if predicate(a) and (user := self._t.users.get(a.user_id)) is not None
            ]
        return sorted(views, key=lambda v: (v.name, v.start_time))

    def assigned_in_range(self, start: datetime, end: datetime) -> list[UserAssignment]:
        return self._assigned(lambda a: a.overlaps(start, end))

    def assigned_at(self, instant: datetime) -> list[UserAssignment]:
        return self._assigned(lambda a: a.covers(instant))


class MemoryAssignmentRepository(_MemoryRepository, AssignmentRepository):
    def _list(self, predicate=lambda a: True) -> list[Assignment]:
        with self._t.lock:
            found = [replace(a) for a in self._t.assignments.values() if predicate(a)]
        return sorted(found, key=lambda a: a.start_time)

    def get_one(self, assignment_id: str) -> Assignment:
        with self._t.lock:
            assignment = self._t.assignments.get(assignment_id)
            if assignment is None:
                raise NotFoundError(f"Assignment {assignment_id!r} not found")
            return replace(assignment)

    def get_all(self) -> list[Assignment]:
        return self._list()

    def by_workspace(self, workspace_id: str) -> list[Assignment]:
        return self._list(lambda a: a.workspace_id == workspace_id)

    def by_user(self, user_id: str) -> list[Assignment]:
        return self._list(lambda a: a.user_id == user_id)

    def create(self, assignment: Assignment) -> str:
        stored = replace(assignment, id=assignment.id or new_id())
        with self._t.lock:
            self._insert(self._t.assignments, stored)
        return stored.id

    def update(self, assignment_id: str, assignment: Assignment) -> None:
        with self._t.lock:
            self.get_one(assignment_id)
            self._t.assignments[assignment_id] = replace(assignment, id=assignment_id)

    def remove(self, assignment_id: str) -> None:
        with self._t.lock:
            self.get_one(assignment_id)
            del self._t.assignments[assignment_id]

    def is_assigned(self, workspace_id: str, start: datetime, end: datetime) -> bool:
        return bool(self._list(lambda a: a.workspace_id == workspace_id and a.overlaps(start, end)))

    def is_fully_assigned(self, workspace_id, start, end, *, user_id=None) -> bool:
        assignments = self._list(
            lambda a: a.workspace_id == workspace_id
            and a.overlaps(start, end)
            and (user_id is None or a.user_id == user_id)
        )
        return is_covered(((a.start_time, a.end_time) for a in assignments), start, end)

    def expired(self, since: datetime) -> list[Assignment]:
        return self._list(lambda a: a.end_time < since)

    def delete(self, assignment_ids: Iterable[str]) -> None:
        with self._t.lock:
            for assignment_id in assignment_ids:
                self._t.assignments.pop(assignment_id, None)


class _NoopCloser:
    def close(self) -> None:
        pass


def build_memory_store() -> DataStore:
    tables = _Tables()
    return DataStore(
        workspaces=MemoryWorkspaceRepository(tables),
        bookings=MemoryBookingRepository(tables),
        offerings=MemoryOfferingRepository(tables),
        floors=MemoryFloorRepository(tables),
        users=MemoryUserRepository(tables),
        assignments=MemoryAssignmentRepository(tables),
        closable=_NoopCloser(),
    )
