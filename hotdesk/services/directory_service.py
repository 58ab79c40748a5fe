from __future__ import annotations

from datetime import datetime

from hotdesk.core.entities.interval import as_utc, require_window
from hotdesk.core.entities.user import User as CoreUser
from hotdesk.core.entities.user import UserAssignment as CoreUserAssignment
from hotdesk.core.errors import ValidationError
from hotdesk.core.repositories.data_store import DataStore
from hotdesk.schemas.models import Assignment, User, UserAssignment


def _to_user_schema(user: CoreUser) -> User:
    return User(
        id=user.id,
        name=user.name,
        department=user.department,
        email=user.email,
        is_admin=user.is_admin,
    )


def _to_user_assignment_schema(view: CoreUserAssignment) -> UserAssignment:
    return UserAssignment(
        user_id=view.user_id,
        name=view.name,
        email=view.email,
        department=view.department,
        is_admin=view.is_admin,
        assignment_id=view.assignment_id,
        workspace_id=view.workspace_id,
        start_time=view.start_time,
        end_time=view.end_time,
    )


def list_users_service(store: DataStore) -> list[User]:
    return [_to_user_schema(u) for u in store.users.get_all()]


def get_user_service(user_id: str, store: DataStore) -> User:
    return _to_user_schema(store.users.get_one(user_id))


def assigned_users_service(
    store: DataStore,
    *,
    start: datetime | None = None,
    end: datetime | None = None,
    at: datetime | None = None,
) -> list[UserAssignment]:
    if at is not None:
        views = store.users.assigned_at(as_utc(at))
    elif start is not None and end is not None:
        views = store.users.assigned_in_range(*require_window(start, end))
    else:
        raise ValidationError("either at, or both start and end, are required")
    return [_to_user_assignment_schema(v) for v in views]


def list_assignments_service(
    store: DataStore,
    *,
    user_id: str | None = None,
    workspace_id: str | None = None,
) -> list[Assignment]:
    if workspace_id is not None:
        assignments = store.assignments.by_workspace(workspace_id)
        if user_id is not None:
            assignments = [a for a in assignments if a.user_id == user_id]
    elif user_id is not None:
        assignments = store.assignments.by_user(user_id)
    else:
        assignments = store.assignments.get_all()
    return [
        Assignment(
            id=a.id,
            workspace_id=a.workspace_id,
            user_id=a.user_id,
            start_time=a.start_time,
            end_time=a.end_time,
        )
        for a in assignments
    ]
