from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass(slots=True)
class Workspace:
    """
    A reservable desk or room. `properties` is free-form metadata that the
    engine stores but never interprets.
    """
    name: str
    floor_id: str
    details: str = ""
    properties: dict[str, Any] = field(default_factory=dict)
    id: str = ""
    deleted_at: datetime | None = None

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None
