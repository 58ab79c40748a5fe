from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from typing import Any

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from hotdesk.core.availability import available_workspace_ids
from hotdesk.core.entities.workspace import Workspace
from hotdesk.core.errors import NotFoundError
from hotdesk.core.repositories.workspace_repository import WorkspaceRepository
from hotdesk.infrastructure.models.models import (
    AssignmentModel,
    BookingModel,
    OfferingModel,
    WorkspaceModel,
)
from hotdesk.infrastructure.repositories.assignment_repository_impl import to_assignment
from hotdesk.infrastructure.repositories.base import SqlRepository, new_id, utcnow
from hotdesk.infrastructure.repositories.window_repository_impl import to_booking, to_offering


def _to_workspace(row: WorkspaceModel) -> Workspace:
    return Workspace(
        id=row.id,
        name=row.name,
        floor_id=row.floor_id,
        details=row.details,
        properties=dict(row.properties or {}),
        deleted_at=row.deleted_at,
    )


def delete_workspace_rows(db: Session, workspace_ids: list[str]) -> None:
    """Hard-delete workspaces and every row that references them. Caller commits."""
    if not workspace_ids:
        return
    for model in (BookingModel, OfferingModel, AssignmentModel):
        db.execute(delete(model).where(model.workspace_id.in_(workspace_ids)))
    db.execute(delete(WorkspaceModel).where(WorkspaceModel.id.in_(workspace_ids)))


class WorkspaceRepositoryImpl(SqlRepository, WorkspaceRepository):
    def _live_row(self, workspace_id: str) -> WorkspaceModel:
        row = self._get(WorkspaceModel, workspace_id)
        if row is None or row.deleted_at is not None:
            raise NotFoundError(f"Workspace {workspace_id!r} not found")
        return row

    def get_one(self, workspace_id: str) -> Workspace:
        with self._guard():
            return _to_workspace(self._live_row(workspace_id))

    def get_all(self) -> list[Workspace]:
        with self._guard():
            rows = self._scalars(
                select(WorkspaceModel).where(WorkspaceModel.deleted_at.is_(None)).order_by(WorkspaceModel.name)
            )
        return [_to_workspace(r) for r in rows]

    def exists(self, workspace_id: str) -> bool:
        with self._guard():
            return self._get(WorkspaceModel, workspace_id) is not None

    def create(self, workspace: Workspace) -> str:
        row = WorkspaceModel(
            id=workspace.id or new_id(),
            name=workspace.name,
            floor_id=workspace.floor_id,
            details=workspace.details,
            properties=dict(workspace.properties),
        )
        with self._guard():
            self._db.add(row)
            self._commit()
        return row.id

    def upsert(self, workspace: Workspace) -> str:
        if not workspace.id:
            return self.create(workspace)
        with self._guard():
            row = self._get(WorkspaceModel, workspace.id)
            if row is None:
                row = WorkspaceModel(id=workspace.id)
                self._db.add(row)
            row.name = workspace.name
            row.floor_id = workspace.floor_id
            row.details = workspace.details
            row.properties = dict(workspace.properties)
            self._commit()
        return workspace.id

    def update(self, workspace_id: str, workspace: Workspace) -> None:
        with self._guard():
            row = self._live_row(workspace_id)
            row.name = workspace.name
            row.floor_id = workspace.floor_id
            row.details = workspace.details
            row.properties = dict(workspace.properties)
            self._commit()

    def update_properties(self, workspace_id: str, properties: dict[str, Any]) -> None:
        with self._guard():
            row = self._live_row(workspace_id)
            row.properties = dict(properties)
            self._commit()

    def remove(self, workspace_id: str) -> None:
        with self._guard():
            row = self._live_row(workspace_id)
            row.deleted_at = utcnow()
            self._commit()

    def by_floor(self, floor_id: str) -> list[Workspace]:
        with self._guard():
            rows = self._scalars(
                select(WorkspaceModel)
                .where(WorkspaceModel.floor_id == floor_id)
                .where(WorkspaceModel.deleted_at.is_(None))
                .order_by(WorkspaceModel.name)
            )
        return [_to_workspace(r) for r in rows]

    def count_by_floor(self, floor_id: str) -> int:
        with self._guard():
            count = self._db.scalar(
                select(func.count(WorkspaceModel.id))
                .where(WorkspaceModel.floor_id == floor_id)
                .where(WorkspaceModel.deleted_at.is_(None))
            )
        return int(count or 0)

    def available(
        self,
        floor_id: str,
        start: datetime,
        end: datetime,
        *,
        exclude_booking_id: str | None = None,
    ) -> list[str]:
        with self._guard():
            workspace_ids = list(
                self._db.scalars(
                    select(WorkspaceModel.id)
                    .where(WorkspaceModel.floor_id == floor_id)
                    .where(WorkspaceModel.deleted_at.is_(None))
                    .order_by(WorkspaceModel.name)
                )
            )
            if not workspace_ids:
                return []

            bookings_stmt = (
                select(BookingModel)
                .where(BookingModel.workspace_id.in_(workspace_ids))
                .where(BookingModel.cancelled.is_(False))
                .where(BookingModel.start_time < end)
                .where(BookingModel.end_time > start)
            )
            if exclude_booking_id is not None:
                bookings_stmt = bookings_stmt.where(BookingModel.id != exclude_booking_id)
            bookings = [to_booking(r) for r in self._scalars(bookings_stmt)]

            assignments = [
                to_assignment(r)
                for r in self._scalars(
                    select(AssignmentModel)
                    .where(AssignmentModel.workspace_id.in_(workspace_ids))
                    .where(AssignmentModel.start_time < end)
                    .where(AssignmentModel.end_time > start)
                )
            ]
            offerings = [
                to_offering(r)
                for r in self._scalars(
                    select(OfferingModel)
                    .where(OfferingModel.workspace_id.in_(workspace_ids))
                    .where(OfferingModel.cancelled.is_(False))
                    .where(OfferingModel.start_time < end)
                    .where(OfferingModel.end_time > start)
                )
            ]

        return available_workspace_ids(
            workspace_ids,
            start,
            end,
            bookings=bookings,
            assignments=assignments,
            offerings=offerings,
        )

    def deleted(self) -> list[Workspace]:
        with self._guard():
            rows = self._scalars(select(WorkspaceModel).where(WorkspaceModel.deleted_at.is_not(None)))
        return [_to_workspace(r) for r in rows]

    def delete(self, workspace_ids: Iterable[str]) -> None:
        ids = list(workspace_ids)
        if not ids:
            return
        with self._guard():
            delete_workspace_rows(self._db, ids)
            self._commit()
