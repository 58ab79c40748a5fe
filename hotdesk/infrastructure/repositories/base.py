from __future__ import annotations

import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone

from sqlalchemy import Select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from hotdesk.core.deadline import check_deadline
from hotdesk.core.errors import DeadlineExceeded, StorageFault


def new_id() -> str:
    return uuid.uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SqlRepository:
    def __init__(self, db: Session) -> None:
        self._db = db

    @contextmanager
    def _guard(self) -> Iterator[None]:
        """Anything the storage engine raises surfaces as StorageFault"""
        try:
            yield
        except SQLAlchemyError as e:
            self._db.rollback()
            raise StorageFault(f"{type(e).__name__}: {e}") from e

    def _scalars(self, stmt: Select) -> list:
        # Other sessions may have committed since this one loaded its rows
        return list(self._db.scalars(stmt.execution_options(populate_existing=True)))

    def _get(self, model, pk: str):
        return self._db.get(model, pk, populate_existing=True)

    def _commit(self) -> None:
        """Commit the pending work unless the request's deadline already passed"""
        try:
            check_deadline("commit")
        except DeadlineExceeded:
            self._db.rollback()
            raise
        self._db.commit()
