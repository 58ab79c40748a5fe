from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class Floor(BaseModel):
    id: str
    name: str
    download_url: str
    address: str


class FloorUpdate(BaseModel):
    name: Optional[str] = None
    address: Optional[str] = None


class DeleteFloor(BaseModel):
    force_delete: bool = False


class WorkspaceIn(BaseModel):
    id: str = ""
    name: str
    floor_id: str
    details: str = ""
    properties: Dict[str, Any] = Field(default_factory=dict)


class WorkspaceUpdate(BaseModel):
    name: Optional[str] = None
    floor_id: Optional[str] = None
    details: Optional[str] = None
    properties: Optional[Dict[str, Any]] = None


class Workspace(BaseModel):
    id: str
    name: str
    floor_id: str
    details: str
    properties: Dict[str, Any]


class Availability(BaseModel):
    floor_id: str
    start_time: datetime
    end_time: datetime
    workspace_ids: List[str]


class WindowCreate(BaseModel):
    workspace_id: str
    user_id: str
    start_time: datetime
    end_time: datetime
    created_by: str = ""


class WindowUpdate(BaseModel):
    workspace_id: Optional[str] = None
    user_id: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    created_by: Optional[str] = None
    cancelled: Optional[bool] = None


class BookingCreate(WindowCreate):
    pass


class BookingUpdate(WindowUpdate):
    pass


class OfferingCreate(WindowCreate):
    pass


class OfferingUpdate(WindowUpdate):
    pass


class Booking(BaseModel):
    id: str
    workspace_id: str
    user_id: str
    start_time: datetime
    end_time: datetime
    cancelled: bool
    created_by: str


class ExpandedBooking(Booking):
    workspace_name: str
    user_name: str
    floor_id: str
    floor_name: str


class Offering(BaseModel):
    id: str
    workspace_id: str
    user_id: str
    start_time: datetime
    end_time: datetime
    cancelled: bool
    created_by: str


class ExpandedOffering(Offering):
    workspace_name: str
    user_name: str
    floor_id: str
    floor_name: str


class User(BaseModel):
    id: str
    name: str
    department: str
    email: str
    is_admin: bool


class UserAssignment(BaseModel):
    user_id: str
    name: str
    email: str
    department: str
    is_admin: bool
    assignment_id: str
    workspace_id: str
    start_time: datetime
    end_time: datetime


class Assignment(BaseModel):
    id: str
    workspace_id: str
    user_id: str
    start_time: datetime
    end_time: datetime
