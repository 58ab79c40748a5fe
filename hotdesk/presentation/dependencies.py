from __future__ import annotations

from collections.abc import Iterator
from functools import lru_cache

from fastapi import Depends
from sqlalchemy.orm import Session

from hotdesk.core.repositories.data_store import DataStore
from hotdesk.core.use_cases.manage_floors import ImageSink
from hotdesk.infrastructure.config import settings
from hotdesk.infrastructure.database import SessionLocal
from hotdesk.infrastructure.image_sink import build_image_sink
from hotdesk.infrastructure.repositories.sql_store import build_sql_store


def get_db() -> Iterator[Session]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_store(db: Session = Depends(get_db)) -> DataStore:
    return build_sql_store(db)


@lru_cache(maxsize=1)
def _image_sink() -> ImageSink:
    return build_image_sink(settings.image_sink)


def get_image_sink() -> ImageSink:
    return _image_sink()
