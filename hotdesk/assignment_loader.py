"""
Out-of-band feed of users and workspace assignments.

Assignments are never created over HTTP; an operator (or a cron job) points
this loader at a YAML or JSON document shaped like

    users:
      - {id: u-1, name: Ada, email: ada@example.com, department: R&D}
    assignments:
      - {workspace_id: ws-1, user_id: u-1,
         start_time: 2026-01-05T00:00:00Z, end_time: 2026-07-01T00:00:00Z}

Users are upserted by id. Assignments carrying an id are upserted, the rest
are created. With `default_offerings` every loaded assignment also gets its
baseline offering.
"""
from __future__ import annotations

import argparse
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, List, Optional

import structlog
import yaml
from pydantic import BaseModel, Field

from hotdesk.core.entities.assignment import Assignment
from hotdesk.core.entities.interval import require_window
from hotdesk.core.entities.user import User
from hotdesk.core.errors import NotFoundError
from hotdesk.core.repositories.data_store import DataStore
from hotdesk.core.use_cases.offer_workspace import CreateDefaultOfferingUseCase
from hotdesk.core.use_cases.workspace_locks import WorkspaceLocks, workspace_locks

logger = structlog.get_logger(__name__)


class UserFeed(BaseModel):
    id: str = Field(min_length=1)
    name: str
    department: str = ""
    email: str = ""
    is_admin: bool = False


class AssignmentFeed(BaseModel):
    id: Optional[str] = None
    workspace_id: str = Field(min_length=1)
    user_id: str = Field(min_length=1)
    start_time: datetime
    end_time: datetime


class Feed(BaseModel):
    users: List[UserFeed] = Field(default_factory=list)
    assignments: List[AssignmentFeed] = Field(default_factory=list)


@dataclass(slots=True)
class LoadResult:
    users: int = 0
    assignments: int = 0
    offerings: int = 0


def read_feed(path: Path) -> Feed:
    # JSON is a subset of YAML, one parser serves both
    with open(path, encoding="utf-8") as f:
        raw: Any = yaml.safe_load(f) or {}
    return Feed.model_validate(raw)


class AssignmentLoader:
    def __init__(self, *, store: DataStore, locks: WorkspaceLocks = workspace_locks) -> None:
        self._store = store
        self._locks = locks

    def _upsert_user(self, item: UserFeed) -> None:
        user = User(
            id=item.id,
            name=item.name,
            department=item.department,
            email=item.email,
            is_admin=item.is_admin,
        )
        try:
            self._store.users.get_one(item.id)
        except NotFoundError:
            self._store.users.create(user)
        else:
            self._store.users.update(item.id, user)

    def _upsert_assignment(self, item: AssignmentFeed) -> Assignment:
        start, end = require_window(item.start_time, item.end_time)
        self._store.workspaces.get_one(item.workspace_id)
        self._store.users.get_one(item.user_id)

        assignment = Assignment(
            id=item.id or "",
            workspace_id=item.workspace_id,
            user_id=item.user_id,
            start_time=start,
            end_time=end,
        )
        if item.id:
            try:
                self._store.assignments.get_one(item.id)
            except NotFoundError:
                pass
            else:
                self._store.assignments.update(item.id, assignment)
                return assignment
        assignment.id = self._store.assignments.create(assignment)
        return assignment

    def load(self, feed: Feed, *, default_offerings: bool = False) -> LoadResult:
        result = LoadResult()
        for user in feed.users:
            self._upsert_user(user)
            result.users += 1

        default_offering = CreateDefaultOfferingUseCase(store=self._store, locks=self._locks)
        for item in feed.assignments:
            assignment = self._upsert_assignment(item)
            result.assignments += 1
            if default_offerings:
                default_offering.execute(assignment=assignment)
                result.offerings += 1

        logger.info(
            "assignments_loaded",
            users=result.users,
            assignments=result.assignments,
            offerings=result.offerings,
        )
        return result


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Load users and workspace assignments into hotdesk.")
    parser.add_argument("feed", type=Path, help="YAML or JSON feed file")
    parser.add_argument(
        "--default-offerings",
        action="store_true",
        help="also create the baseline offering for every loaded assignment",
    )
    args = parser.parse_args(argv)

    import hotdesk.infrastructure.models.models  # noqa: F401
    from hotdesk.infrastructure.config import settings
    from hotdesk.infrastructure.database import Base, SessionLocal, engine
    from hotdesk.infrastructure.logging import setup_logging
    from hotdesk.infrastructure.repositories.sql_store import build_sql_store

    setup_logging(settings.log_level)
    Base.metadata.create_all(bind=engine)
    store = build_sql_store(SessionLocal())
    try:
        AssignmentLoader(store=store).load(read_feed(args.feed), default_offerings=args.default_offerings)
    finally:
        store.close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
