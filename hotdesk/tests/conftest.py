from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.orm import sessionmaker

import hotdesk.infrastructure.models.models  # noqa: F401
from hotdesk.core.entities.assignment import Assignment
from hotdesk.core.entities.floor import Floor
from hotdesk.core.entities.user import User
from hotdesk.core.entities.workspace import Workspace
from hotdesk.core.repositories.data_store import DataStore
from hotdesk.infrastructure.database import Base, build_engine
from hotdesk.infrastructure.repositories.memory_store import build_memory_store
from hotdesk.infrastructure.repositories.sql_store import build_sql_store

T0 = datetime(2025, 3, 1, tzinfo=timezone.utc)


def at(hours: float) -> datetime:
    """Instant `hours` after midnight of 2025-03-01, UTC."""
    return T0 + timedelta(hours=hours)


@dataclass(frozen=True)
class Office:
    floor_id: str = "floor-1"
    desk: str = "ws-1"
    other_desk: str = "ws-2"
    owner: str = "u-owner"
    colleague: str = "u-colleague"
    visitor: str = "u-visitor"


def seed_office(store: DataStore) -> Office:
    office = Office()
    store.floors.create(Floor(id=office.floor_id, name="Level 1", address="1 Main St", download_url="x"))
    store.workspaces.create(Workspace(id=office.desk, name="Desk A", floor_id=office.floor_id))
    store.workspaces.create(Workspace(id=office.other_desk, name="Desk B", floor_id=office.floor_id))
    for user_id, name in ((office.owner, "Olive"), (office.colleague, "Colin"), (office.visitor, "Vera")):
        store.users.create(User(id=user_id, name=name, email=f"{user_id}@example.com"))
    return office


def assign(store: DataStore, workspace_id: str, user_id: str, start: datetime, end: datetime) -> Assignment:
    assignment = Assignment(workspace_id=workspace_id, user_id=user_id, start_time=start, end_time=end)
    assignment.id = store.assignments.create(assignment)
    return assignment


@pytest.fixture()
def store() -> DataStore:
    return build_memory_store()


@pytest.fixture()
def sql_store() -> Iterator[DataStore]:
    """A fresh in-memory SQLite database per test"""
    engine = build_engine("sqlite+pysqlite:///:memory:")
    Base.metadata.create_all(bind=engine)
    session_factory = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    store = build_sql_store(session_factory())
    try:
        yield store
    finally:
        store.close()
        engine.dispose()


@pytest.fixture(params=["memory", "sql"])
def any_store(request: pytest.FixtureRequest) -> DataStore:
    """Runs the test once against each storage binding"""
    if request.param == "memory":
        return request.getfixturevalue("store")
    return request.getfixturevalue("sql_store")


@pytest.fixture()
def office(store: DataStore) -> Office:
    return seed_office(store)
