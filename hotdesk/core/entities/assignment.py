from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from hotdesk.core.entities.interval import covers, overlaps


@dataclass(slots=True)
class Assignment:
    workspace_id: str
    user_id: str
    start_time: datetime
    end_time: datetime
    id: str = ""

    def covers(self, instant: datetime) -> bool:
        return covers(self.start_time, self.end_time, instant)

    def overlaps(self, start: datetime, end: datetime) -> bool:
        return overlaps(self.start_time, self.end_time, start, end)
