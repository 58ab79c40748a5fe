from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from hotdesk.core.entities.interval import covers, overlaps


@dataclass(slots=True)
class Offering:
    """
    The assignee of a workspace releasing it to the shared pool for
    [start_time, end_time).
    """
    workspace_id: str
    user_id: str
    start_time: datetime
    end_time: datetime
    cancelled: bool = False
    created_by: str = ""
    id: str = ""

    def covers(self, instant: datetime) -> bool:
        return covers(self.start_time, self.end_time, instant)

    def overlaps(self, start: datetime, end: datetime) -> bool:
        return overlaps(self.start_time, self.end_time, start, end)

    def same_span(self, start: datetime, end: datetime) -> bool:
        return self.start_time == start and self.end_time == end

    def cancel(self) -> bool:
        if self.cancelled:
            return False
        self.cancelled = True
        return True


@dataclass(slots=True)
class ExpandedOffering:
    offering: Offering
    workspace_name: str
    user_name: str
    floor_id: str
    floor_name: str
