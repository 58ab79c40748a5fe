from __future__ import annotations

from datetime import datetime

from sqlalchemy import select

from hotdesk.core.entities.user import User, UserAssignment
from hotdesk.core.errors import NotFoundError
from hotdesk.core.repositories.user_repository import UserRepository
from hotdesk.infrastructure.models.models import AssignmentModel, UserModel
from hotdesk.infrastructure.repositories.base import SqlRepository, new_id


def _to_user(row: UserModel) -> User:
    return User(
        id=row.id,
        name=row.name,
        department=row.department,
        email=row.email,
        is_admin=row.is_admin,
    )


class UserRepositoryImpl(SqlRepository, UserRepository):
    def _row(self, user_id: str) -> UserModel:
        row = self._get(UserModel, user_id)
        if row is None:
            raise NotFoundError(f"User {user_id!r} not found")
        return row

    def get_one(self, user_id: str) -> User:
        with self._guard():
            return _to_user(self._row(user_id))

    def get_all(self) -> list[User]:
        with self._guard():
            rows = self._scalars(select(UserModel).order_by(UserModel.name))
        return [_to_user(r) for r in rows]

    def create(self, user: User) -> str:
        row = UserModel(
            id=user.id or new_id(),
            name=user.name,
            department=user.department,
            email=user.email,
            is_admin=user.is_admin,
        )
        with self._guard():
            self._db.add(row)
            self._commit()
        return row.id

    def update(self, user_id: str, user: User) -> None:
        with self._guard():
            row = self._row(user_id)
            row.name = user.name
            row.department = user.department
            row.email = user.email
            row.is_admin = user.is_admin
            self._commit()

    def _assigned(self, *criteria) -> list[UserAssignment]:
        stmt = (
            select(UserModel, AssignmentModel)
            .join(AssignmentModel, AssignmentModel.user_id == UserModel.id)
            .where(*criteria)
            .order_by(UserModel.name, AssignmentModel.start_time)
            .execution_options(populate_existing=True)
        )
        with self._guard():
            rows = self._db.execute(stmt).all()
        return [
            UserAssignment(
                user_id=user.id,
                name=user.name,
                email=user.email,
                department=user.department,
                is_admin=user.is_admin,
                assignment_id=assignment.id,
                workspace_id=assignment.workspace_id,
                start_time=assignment.start_time,
                end_time=assignment.end_time,
            )
            for user, assignment in rows
        ]

    def assigned_in_range(self, start: datetime, end: datetime) -> list[UserAssignment]:
        return self._assigned(AssignmentModel.start_time < end, AssignmentModel.end_time > start)

    def assigned_at(self, instant: datetime) -> list[UserAssignment]:
        return self._assigned(AssignmentModel.start_time <= instant, AssignmentModel.end_time > instant)
