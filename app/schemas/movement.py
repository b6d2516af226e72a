from pydantic import BaseModel
from datetime import datetime
from typing import Optional


class TruckStatusChange(BaseModel):
    status_name: str
    changed_by: Optional[str] = None


class TruckLocationChange(BaseModel):
    location: Optional[str] = None


class DoorStatusChange(BaseModel):
    door_status: str


class LiveMovementOut(BaseModel):
    id: int
    truck_number: str
    current_location: Optional[str]
    status_id: Optional[int]
    status_name: Optional[str] = None
    in_front_of: Optional[str]
    loading_door_id: Optional[int]
    last_updated: Optional[datetime]

    class Config:
        from_attributes = True


class BoardSnapshot(BaseModel):
    doors: dict[str, str] = {}
    trucks: dict[str, Optional[str]] = {}


class AnnouncementsOut(BaseModel):
    announcements: list[str]
    snapshot: BoardSnapshot
