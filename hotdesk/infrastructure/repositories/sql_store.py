from __future__ import annotations

from sqlalchemy.orm import Session

from hotdesk.core.repositories.data_store import DataStore
from hotdesk.infrastructure.repositories.assignment_repository_impl import AssignmentRepositoryImpl
from hotdesk.infrastructure.repositories.floor_repository_impl import FloorRepositoryImpl
from hotdesk.infrastructure.repositories.user_repository_impl import UserRepositoryImpl
from hotdesk.infrastructure.repositories.window_repository_impl import (
    BookingRepositoryImpl,
    OfferingRepositoryImpl,
)
from hotdesk.infrastructure.repositories.workspace_repository_impl import WorkspaceRepositoryImpl


def build_sql_store(db: Session) -> DataStore:
    """Relational binding: every provider shares the one session"""
    return DataStore(
        workspaces=WorkspaceRepositoryImpl(db),
        bookings=BookingRepositoryImpl(db),
        offerings=OfferingRepositoryImpl(db),
        floors=FloorRepositoryImpl(db),
        users=UserRepositoryImpl(db),
        assignments=AssignmentRepositoryImpl(db),
        closable=db,
    )
