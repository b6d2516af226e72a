from pydantic import BaseModel
from datetime import datetime
from typing import Optional


class PrintroomEntryUpdate(BaseModel):
    truck_number: Optional[str] = None
    route_info: Optional[str] = None
    pods: Optional[int] = None
    pallets_trays: Optional[int] = None
    notes: Optional[str] = None


class PrintroomEntryOut(BaseModel):
    id: int
    loading_door_id: int
    batch_number: int
    row_order: int
    route_info: Optional[str]
    truck_number: Optional[str]
    pods: int
    pallets_trays: int
    notes: Optional[str]
    is_end_marker: bool
    created_at: Optional[datetime]

    class Config:
        from_attributes = True


class EndMarkerCreate(BaseModel):
    loading_door_id: int
    batch_number: int = 1


class StagingPositionUpdate(BaseModel):
    position: str             # in_front | in_back
    truck_number: Optional[str] = None
