# app/routers/movement.py
"""
Live movement board — truck status / location and loading door status.
Status changes notify subscribers and return the voice announcement text.
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from app.database import get_db
from app.exceptions import UnresolvedReferenceError
from app.models.live_movement import LiveMovement
from app.schemas.movement import (
    AnnouncementsOut,
    BoardSnapshot,
    DoorStatusChange,
    LiveMovementOut,
    TruckLocationChange,
    TruckStatusChange,
)
from app.services import movement_service
from app.services.message_builder import door_announcement, truck_announcement

router = APIRouter()


@router.get("/movement", response_model=list[LiveMovementOut], summary="Live movement board")
def list_movement(db: Session = Depends(get_db)):
    return db.query(LiveMovement).order_by(LiveMovement.truck_number).all()


@router.post("/movement/announcements", response_model=AnnouncementsOut,
             summary="Voice announcements since the caller's last snapshot")
def announcements(body: BoardSnapshot, db: Session = Depends(get_db)):
    texts, doors, trucks = movement_service.announcements_since(db, body.doors, body.trucks)
    return AnnouncementsOut(announcements=texts, snapshot=BoardSnapshot(doors=doors, trucks=trucks))


@router.put("/movement/{truck_number}/status", summary="Change a truck's status (notifies subscribers)")
async def change_status(truck_number: str, body: TruckStatusChange, db: Session = Depends(get_db)):
    try:
        row, result = await movement_service.set_truck_status(db, truck_number, body.status_name, body.changed_by)
    except UnresolvedReferenceError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {
        "truck_number": row.truck_number,
        "status": row.status_name,
        "announcement": truck_announcement(row.truck_number, row.status_name),
        "sent_notifications": result.notified,
        "sent_sms": result.sms_sent,
        "sent_email": result.email_sent,
    }


@router.put("/movement/{truck_number}/location", response_model=LiveMovementOut, summary="Change a truck's location")
def change_location(truck_number: str, body: TruckLocationChange, db: Session = Depends(get_db)):
    try:
        return movement_service.set_truck_location(db, truck_number, body.location)
    except UnresolvedReferenceError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.put("/doors/{door_id}/status", summary="Change a loading door's status")
def change_door_status(door_id: int, body: DoorStatusChange, db: Session = Depends(get_db)):
    try:
        door = movement_service.set_door_status(db, door_id, body.door_status)
    except UnresolvedReferenceError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {
        "id": door.id,
        "door_status": door.door_status,
        "announcement": door_announcement(door.door_name, door.door_status),
    }
