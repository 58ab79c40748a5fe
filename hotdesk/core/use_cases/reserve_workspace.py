from __future__ import annotations

from dataclasses import replace
from datetime import datetime

import structlog

from hotdesk.core.deadline import check_deadline
from hotdesk.core.entities.booking import Booking
from hotdesk.core.entities.interval import require_window
from hotdesk.core.entities.workspace import Workspace
from hotdesk.core.errors import ConflictError, InvalidOperationError
from hotdesk.core.repositories.data_store import DataStore
from hotdesk.core.use_cases.workspace_locks import WorkspaceLocks

logger = structlog.get_logger(__name__)


def require_available(
    store: DataStore,
    workspace: Workspace,
    start: datetime,
    end: datetime,
    *,
    exclude_booking_id: str | None = None,
) -> None:
    available = store.workspaces.available(
        workspace.floor_id, start, end, exclude_booking_id=exclude_booking_id
    )
    if workspace.id not in available:
        raise ConflictError(
            f"Workspace {workspace.id!r} is not available between {start.isoformat()} and {end.isoformat()}"
        )


class CreateBookingUseCase:
    """
    Reserve a workspace for [start, end).

    The availability check and the insert run while holding the workspace's
    lock, so concurrent requests for the same workspace are serialized.
    """

    def __init__(self, *, store: DataStore, locks: WorkspaceLocks) -> None:
        self._store = store
        self._locks = locks

    def execute(
        self,
        *,
        workspace_id: str,
        user_id: str,
        start: datetime,
        end: datetime,
        created_by: str = "",
    ) -> Booking:
        start, end = require_window(start, end)
        workspace = self._store.workspaces.get_one(workspace_id)
        self._store.users.get_one(user_id)

        booking = Booking(
            workspace_id=workspace_id,
            user_id=user_id,
            start_time=start,
            end_time=end,
            created_by=created_by or user_id,
        )

        with self._locks.hold(workspace_id):
            try:
                require_available(self._store, workspace, start, end)
            except ConflictError:
                logger.info("booking_conflict", workspace_id=workspace_id, user_id=user_id)
                raise
            check_deadline("booking create")
            booking.id = self._store.bookings.create(booking)

        logger.info("booking_created", booking_id=booking.id, workspace_id=workspace_id, user_id=user_id)
        return booking


class CancelBookingUseCase:
    def __init__(self, *, store: DataStore, locks: WorkspaceLocks) -> None:
        self._store = store
        self._locks = locks

    def execute(self, *, booking_id: str) -> Booking:
        workspace_id = self._store.bookings.get_one(booking_id).workspace_id
        with self._locks.hold(workspace_id):
            booking = self._store.bookings.get_one(booking_id)
            if booking.cancel():
                check_deadline("booking cancel")
                self._store.bookings.update(booking_id, booking)
                logger.info("booking_cancelled", booking_id=booking_id)
        return booking


class UpdateBookingUseCase:
    """
    Change a booking's workspace, user or window.

    Evaluated as cancel + create: the new values must pass the same checks
    as a fresh booking, with the original ignored by the availability check.
    When they fail the original is left untouched. The stored booking is
    re-read under the workspace lock, so a cancel that lands first wins.
    """

    def __init__(self, *, store: DataStore, locks: WorkspaceLocks) -> None:
        self._store = store
        self._locks = locks

    def execute(
        self,
        *,
        booking_id: str,
        workspace_id: str | None = None,
        user_id: str | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
        created_by: str | None = None,
        cancelled: bool | None = None,
    ) -> Booking:
        current = self._store.bookings.get_one(booking_id)

        if cancelled is False and current.cancelled:
            raise InvalidOperationError("A cancelled booking cannot be reinstated")
        if cancelled:
            return CancelBookingUseCase(store=self._store, locks=self._locks).execute(booking_id=booking_id)
        if current.cancelled:
            raise InvalidOperationError("A cancelled booking cannot be changed")

        target_id = workspace_id or current.workspace_id
        workspace = self._store.workspaces.get_one(target_id)
        if user_id and user_id != current.user_id:
            self._store.users.get_one(user_id)

        with self._locks.hold(current.workspace_id, target_id):
            current = self._store.bookings.get_one(booking_id)
            if current.cancelled:
                raise InvalidOperationError("A cancelled booking cannot be changed")
            if workspace_id is None and current.workspace_id != target_id:
                raise ConflictError(f"Booking {booking_id!r} was moved while being updated")

            candidate = replace(
                current,
                workspace_id=target_id,
                user_id=user_id or current.user_id,
                start_time=start or current.start_time,
                end_time=end or current.end_time,
                created_by=created_by if created_by is not None else current.created_by,
            )
            candidate.start_time, candidate.end_time = require_window(candidate.start_time, candidate.end_time)
            require_available(
                self._store,
                workspace,
                candidate.start_time,
                candidate.end_time,
                exclude_booking_id=current.id,
            )
            check_deadline("booking update")
            self._store.bookings.update(booking_id, candidate)

        logger.info("booking_updated", booking_id=booking_id, workspace_id=candidate.workspace_id)
        return candidate
