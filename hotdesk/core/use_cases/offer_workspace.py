from __future__ import annotations

from dataclasses import replace
from datetime import datetime

import structlog

from hotdesk.core.deadline import check_deadline
from hotdesk.core.entities.assignment import Assignment
from hotdesk.core.entities.interval import require_window
from hotdesk.core.entities.offering import Offering
from hotdesk.core.errors import ConflictError, InvalidOperationError
from hotdesk.core.repositories.data_store import DataStore
from hotdesk.core.use_cases.workspace_locks import WorkspaceLocks

logger = structlog.get_logger(__name__)


def _require_assignment(store: DataStore, offering: Offering) -> None:
    if not store.assignments.is_fully_assigned(
        offering.workspace_id,
        offering.start_time,
        offering.end_time,
        user_id=offering.user_id,
    ):
        raise ConflictError(
            f"User {offering.user_id!r} holds no assignment on workspace "
            f"{offering.workspace_id!r} covering the offered window"
        )


def _require_no_overlap(store: DataStore, offering: Offering, *, exclude_id: str | None = None) -> None:
    clashing = store.offerings.overlapping_for_user(
        offering.workspace_id,
        offering.user_id,
        offering.start_time,
        offering.end_time,
        exclude_id=exclude_id,
    )
    if clashing:
        raise ConflictError(
            f"User {offering.user_id!r} already offers workspace {offering.workspace_id!r} "
            f"in an overlapping window (offering {clashing[0].id!r})"
        )


class CreateOfferingUseCase:
    """
    Release an assigned workspace to the shared pool for [start, end).

    The issuing user must hold assignments covering the whole window and may
    not already have a live offering on the workspace that overlaps it.
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
    ) -> Offering:
        start, end = require_window(start, end)
        self._store.workspaces.get_one(workspace_id)
        self._store.users.get_one(user_id)

        offering = Offering(
            workspace_id=workspace_id,
            user_id=user_id,
            start_time=start,
            end_time=end,
            created_by=created_by or user_id,
        )

        with self._locks.hold(workspace_id):
            try:
                _require_assignment(self._store, offering)
                _require_no_overlap(self._store, offering)
            except ConflictError:
                logger.info("offering_conflict", workspace_id=workspace_id, user_id=user_id)
                raise
            check_deadline("offering create")
            offering.id = self._store.offerings.create(offering)

        logger.info("offering_created", offering_id=offering.id, workspace_id=workspace_id, user_id=user_id)
        return offering


class CreateDefaultOfferingUseCase:
    """
    Baseline offering spanning a freshly created assignment.

    Idempotent: when the assignee already has a live offering with exactly
    the assignment's span, that offering is returned instead of a new one.
    """

    def __init__(self, *, store: DataStore, locks: WorkspaceLocks) -> None:
        self._store = store
        self._locks = locks

    def execute(self, *, assignment: Assignment) -> Offering:
        start, end = require_window(assignment.start_time, assignment.end_time)
        offering = Offering(
            workspace_id=assignment.workspace_id,
            user_id=assignment.user_id,
            start_time=start,
            end_time=end,
            created_by=assignment.user_id,
        )

        with self._locks.hold(assignment.workspace_id):
            overlapping = self._store.offerings.overlapping_for_user(
                assignment.workspace_id, assignment.user_id, start, end
            )
            for existing in overlapping:
                if existing.same_span(start, end):
                    return existing

            _require_assignment(self._store, offering)
            if overlapping:
                raise ConflictError(
                    f"User {assignment.user_id!r} already offers workspace "
                    f"{assignment.workspace_id!r} in part of the assignment window"
                )
            check_deadline("offering create")
            offering.id = self._store.offerings.create(offering)

        logger.info("default_offering_created", offering_id=offering.id, assignment_id=assignment.id)
        return offering


class CancelOfferingUseCase:
    """
    Cancel an offering. Bookings already accepted against it stand.
    """

    def __init__(self, *, store: DataStore, locks: WorkspaceLocks) -> None:
        self._store = store
        self._locks = locks

    def execute(self, *, offering_id: str) -> Offering:
        workspace_id = self._store.offerings.get_one(offering_id).workspace_id
        with self._locks.hold(workspace_id):
            offering = self._store.offerings.get_one(offering_id)
            if offering.cancel():
                check_deadline("offering cancel")
                self._store.offerings.update(offering_id, offering)
                logger.info("offering_cancelled", offering_id=offering_id)
        return offering


class UpdateOfferingUseCase:
    def __init__(self, *, store: DataStore, locks: WorkspaceLocks) -> None:
        self._store = store
        self._locks = locks

    def execute(
        self,
        *,
        offering_id: str,
        workspace_id: str | None = None,
        user_id: str | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
        created_by: str | None = None,
        cancelled: bool | None = None,
    ) -> Offering:
        current = self._store.offerings.get_one(offering_id)

        if cancelled is False and current.cancelled:
            raise InvalidOperationError("A cancelled offering cannot be reinstated")
        if cancelled:
            return CancelOfferingUseCase(store=self._store, locks=self._locks).execute(offering_id=offering_id)
        if current.cancelled:
            raise InvalidOperationError("A cancelled offering cannot be changed")

        target_id = workspace_id or current.workspace_id
        self._store.workspaces.get_one(target_id)
        if user_id and user_id != current.user_id:
            self._store.users.get_one(user_id)

        with self._locks.hold(current.workspace_id, target_id):
            # A cancel may have landed between the first read and the lock
            current = self._store.offerings.get_one(offering_id)
            if current.cancelled:
                raise InvalidOperationError("A cancelled offering cannot be changed")
            if workspace_id is None and current.workspace_id != target_id:
                raise ConflictError(f"Offering {offering_id!r} was moved while being updated")

            candidate = replace(
                current,
                workspace_id=target_id,
                user_id=user_id or current.user_id,
                start_time=start or current.start_time,
                end_time=end or current.end_time,
                created_by=created_by if created_by is not None else current.created_by,
            )
            candidate.start_time, candidate.end_time = require_window(candidate.start_time, candidate.end_time)
            _require_assignment(self._store, candidate)
            _require_no_overlap(self._store, candidate, exclude_id=current.id)
            check_deadline("offering update")
            self._store.offerings.update(offering_id, candidate)

        logger.info("offering_updated", offering_id=offering_id, workspace_id=candidate.workspace_id)
        return candidate
