"""
Bookings and offerings share their shape (workspace, user, window,
cancelled, created_by) and most of their queries; the shared part lives in
_WindowRepositoryImpl and the two public classes add what is specific.
"""
from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from sqlalchemy import delete, select

from hotdesk.core.entities.booking import Booking, ExpandedBooking
from hotdesk.core.entities.offering import ExpandedOffering, Offering
from hotdesk.core.errors import EmptyError, NotFoundError
from hotdesk.core.repositories.booking_repository import BookingRepository
from hotdesk.core.repositories.offering_repository import OfferingRepository
from hotdesk.infrastructure.models.models import (
    BookingModel,
    FloorModel,
    OfferingModel,
    UserModel,
    WorkspaceModel,
)
from hotdesk.infrastructure.repositories.base import SqlRepository, new_id


def to_booking(row: BookingModel) -> Booking:
    return Booking(
        id=row.id,
        workspace_id=row.workspace_id,
        user_id=row.user_id,
        start_time=row.start_time,
        end_time=row.end_time,
        cancelled=row.cancelled,
        created_by=row.created_by,
    )


def to_offering(row: OfferingModel) -> Offering:
    return Offering(
        id=row.id,
        workspace_id=row.workspace_id,
        user_id=row.user_id,
        start_time=row.start_time,
        end_time=row.end_time,
        cancelled=row.cancelled,
        created_by=row.created_by,
    )


class _WindowRepositoryImpl(SqlRepository):
    _model: type[BookingModel] | type[OfferingModel]
    _kind: str

    def _to_entity(self, row):
        raise NotImplementedError

    def _to_expanded(self, record, workspace_name: str, user_name: str, floor_id: str, floor_name: str):
        raise NotImplementedError

    def _row(self, record_id: str):
        row = self._get(self._model, record_id)
        if row is None:
            raise NotFoundError(f"{self._kind.capitalize()} {record_id!r} not found")
        return row

    def _select(self):
        return select(self._model).order_by(self._model.start_time)

    def _select_expanded(self):
        model = self._model
        return (
            select(
                model,
                WorkspaceModel.name.label("workspace_name"),
                UserModel.name.label("user_name"),
                FloorModel.id.label("floor_id"),
                FloorModel.name.label("floor_name"),
            )
            .join(WorkspaceModel, model.workspace_id == WorkspaceModel.id)
            .join(FloorModel, WorkspaceModel.floor_id == FloorModel.id)
            .join(UserModel, model.user_id == UserModel.id)
            .order_by(model.start_time)
            .execution_options(populate_existing=True)
        )

    def _list(self, *criteria) -> list:
        with self._guard():
            rows = self._scalars(self._select().where(*criteria))
        return [self._to_entity(r) for r in rows]

    def _list_expanded(self, *criteria) -> list:
        with self._guard():
            rows = self._db.execute(self._select_expanded().where(*criteria)).all()
        return [
            self._to_expanded(self._to_entity(row), ws_name, user_name, floor_id, floor_name)
            for row, ws_name, user_name, floor_id, floor_name in rows
        ]

    def _overlapping_criteria(self, start: datetime, end: datetime) -> tuple:
        return self._model.start_time < end, self._model.end_time > start

    def get_one(self, record_id: str):
        with self._guard():
            return self._to_entity(self._row(record_id))

    def get_one_expanded(self, record_id: str):
        found = self._list_expanded(self._model.id == record_id)
        if not found:
            raise NotFoundError(f"{self._kind.capitalize()} {record_id!r} not found")
        return found[0]

    def get_all(self) -> list:
        return self._list()

    def get_all_expanded(self) -> list:
        return self._list_expanded()

    def by_workspace(self, workspace_id: str) -> list:
        return self._list(self._model.workspace_id == workspace_id)

    def by_workspace_expanded(self, workspace_id: str) -> list:
        return self._list_expanded(self._model.workspace_id == workspace_id)

    def by_user(self, user_id: str) -> list:
        return self._list(self._model.user_id == user_id)

    def by_user_expanded(self, user_id: str) -> list:
        return self._list_expanded(self._model.user_id == user_id)

    def by_range(self, start: datetime, end: datetime) -> list:
        return self._list(*self._overlapping_criteria(start, end))

    def by_range_expanded(self, start: datetime, end: datetime) -> list:
        return self._list_expanded(*self._overlapping_criteria(start, end))

    def _live_overlapping(
        self,
        workspace_id: str,
        start: datetime,
        end: datetime,
        *,
        user_id: str | None = None,
        exclude_id: str | None = None,
    ) -> list:
        criteria = [
            self._model.workspace_id == workspace_id,
            self._model.cancelled.is_(False),
            *self._overlapping_criteria(start, end),
        ]
        if user_id is not None:
            criteria.append(self._model.user_id == user_id)
        if exclude_id is not None:
            criteria.append(self._model.id != exclude_id)
        return self._list(*criteria)

    def create(self, record) -> str:
        row = self._model(
            id=record.id or new_id(),
            workspace_id=record.workspace_id,
            user_id=record.user_id,
            start_time=record.start_time,
            end_time=record.end_time,
            cancelled=record.cancelled,
            created_by=record.created_by,
        )
        with self._guard():
            self._db.add(row)
            self._commit()
        return row.id

    def update(self, record_id: str, record) -> None:
        with self._guard():
            row = self._row(record_id)
            row.workspace_id = record.workspace_id
            row.user_id = record.user_id
            row.start_time = record.start_time
            row.end_time = record.end_time
            # cancelled never goes back to False
            row.cancelled = row.cancelled or record.cancelled
            row.created_by = record.created_by
            self._commit()

    def remove(self, record_id: str) -> None:
        with self._guard():
            row = self._row(record_id)
            self._db.delete(row)
            self._commit()

    def expired(self, since: datetime) -> list:
        return self._list(self._model.end_time < since)

    def delete(self, record_ids: Iterable[str]) -> None:
        ids = list(record_ids)
        if not ids:
            return
        with self._guard():
            self._db.execute(delete(self._model).where(self._model.id.in_(ids)))
            self._commit()


class BookingRepositoryImpl(_WindowRepositoryImpl, BookingRepository):
    _model = BookingModel
    _kind = "booking"

    def _to_entity(self, row: BookingModel) -> Booking:
        return to_booking(row)

    def _to_expanded(self, record, workspace_name, user_name, floor_id, floor_name) -> ExpandedBooking:
        return ExpandedBooking(record, workspace_name, user_name, floor_id, floor_name)

    def overlapping(
        self,
        workspace_id: str,
        start: datetime,
        end: datetime,
        *,
        exclude_id: str | None = None,
    ) -> list[Booking]:
        return self._live_overlapping(workspace_id, start, end, exclude_id=exclude_id)


class OfferingRepositoryImpl(_WindowRepositoryImpl, OfferingRepository):
    _model = OfferingModel
    _kind = "offering"

    def _to_entity(self, row: OfferingModel) -> Offering:
        return to_offering(row)

    def _to_expanded(self, record, workspace_name, user_name, floor_id, floor_name) -> ExpandedOffering:
        return ExpandedOffering(record, workspace_name, user_name, floor_id, floor_name)

    def by_workspace_and_range(self, workspace_id: str, start: datetime, end: datetime) -> Offering:
        found = self._list(
            OfferingModel.workspace_id == workspace_id,
            OfferingModel.cancelled.is_(False),
            OfferingModel.start_time <= start,
            OfferingModel.end_time >= end,
        )
        if not found:
            raise EmptyError(f"No offering on workspace {workspace_id!r} covers the requested window")
        return found[0]

    def overlapping_for_user(
        self,
        workspace_id: str,
        user_id: str,
        start: datetime,
        end: datetime,
        *,
        exclude_id: str | None = None,
    ) -> list[Offering]:
        return self._live_overlapping(workspace_id, start, end, user_id=user_id, exclude_id=exclude_id)
