from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from sqlalchemy import delete, select

from hotdesk.core.availability import is_covered
from hotdesk.core.entities.assignment import Assignment
from hotdesk.core.errors import NotFoundError
from hotdesk.core.repositories.assignment_repository import AssignmentRepository
from hotdesk.infrastructure.models.models import AssignmentModel
from hotdesk.infrastructure.repositories.base import SqlRepository, new_id


def to_assignment(row: AssignmentModel) -> Assignment:
    return Assignment(
        id=row.id,
        workspace_id=row.workspace_id,
        user_id=row.user_id,
        start_time=row.start_time,
        end_time=row.end_time,
    )


class AssignmentRepositoryImpl(SqlRepository, AssignmentRepository):
    def _row(self, assignment_id: str) -> AssignmentModel:
        row = self._get(AssignmentModel, assignment_id)
        if row is None:
            raise NotFoundError(f"Assignment {assignment_id!r} not found")
        return row

    def _list(self, *criteria) -> list[Assignment]:
        with self._guard():
            rows = self._scalars(select(AssignmentModel).where(*criteria).order_by(AssignmentModel.start_time))
        return [to_assignment(r) for r in rows]

    def get_one(self, assignment_id: str) -> Assignment:
        with self._guard():
            return to_assignment(self._row(assignment_id))

    def get_all(self) -> list[Assignment]:
        return self._list()

    def by_workspace(self, workspace_id: str) -> list[Assignment]:
        return self._list(AssignmentModel.workspace_id == workspace_id)

    def by_user(self, user_id: str) -> list[Assignment]:
        return self._list(AssignmentModel.user_id == user_id)

    def create(self, assignment: Assignment) -> str:
        row = AssignmentModel(
            id=assignment.id or new_id(),
            workspace_id=assignment.workspace_id,
            user_id=assignment.user_id,
            start_time=assignment.start_time,
            end_time=assignment.end_time,
        )
        with self._guard():
            self._db.add(row)
            self._commit()
        return row.id

    def update(self, assignment_id: str, assignment: Assignment) -> None:
        with self._guard():
            row = self._row(assignment_id)
            row.workspace_id = assignment.workspace_id
            row.user_id = assignment.user_id
            row.start_time = assignment.start_time
            row.end_time = assignment.end_time
            self._commit()

    def remove(self, assignment_id: str) -> None:
        with self._guard():
            self._db.delete(self._row(assignment_id))
            self._commit()

    def _overlapping(self, workspace_id: str, start: datetime, end: datetime, user_id: str | None = None):
        criteria = [
            AssignmentModel.workspace_id == workspace_id,
            AssignmentModel.start_time < end,
            AssignmentModel.end_time > start,
        ]
        if user_id is not None:
            criteria.append(AssignmentModel.user_id == user_id)
        return self._list(*criteria)

    def is_assigned(self, workspace_id: str, start: datetime, end: datetime) -> bool:
        return bool(self._overlapping(workspace_id, start, end))

    def is_fully_assigned(
        self,
        workspace_id: str,
        start: datetime,
        end: datetime,
        *,
        user_id: str | None = None,
    ) -> bool:
        assignments = self._overlapping(workspace_id, start, end, user_id)
        return is_covered(((a.start_time, a.end_time) for a in assignments), start, end)

    def expired(self, since: datetime) -> list[Assignment]:
        return self._list(AssignmentModel.end_time < since)

    def delete(self, assignment_ids: Iterable[str]) -> None:
        ids = list(assignment_ids)
        if not ids:
            return
        with self._guard():
            self._db.execute(delete(AssignmentModel).where(AssignmentModel.id.in_(ids)))
            self._commit()
