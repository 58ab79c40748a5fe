from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(slots=True)
class User:
    id: str
    name: str
    department: str = ""
    email: str = ""
    is_admin: bool = False


@dataclass(frozen=True, slots=True)
class UserAssignment:
    """Read view: a user together with one of their assignments."""
    user_id: str
    name: str
    email: str
    department: str
    is_admin: bool
    assignment_id: str
    workspace_id: str
    start_time: datetime
    end_time: datetime
