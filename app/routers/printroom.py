# app/routers/printroom.py
"""
Printroom entries + preshift staging edits.
Every write here runs one automation pass; the report is returned so the
UI can show what the rules did.
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from app.database import get_db
from app.models.printroom_entry import PrintroomEntry
from app.models.staging_door import StagingDoor
from app.schemas.automation import ExecutionReportOut
from app.schemas.printroom import (
    EndMarkerCreate,
    PrintroomEntryOut,
    PrintroomEntryUpdate,
    StagingPositionUpdate,
)
from app.services import movement_service

router = APIRouter()


@router.get("/printroom", response_model=list[PrintroomEntryOut], summary="Printroom entries")
def list_entries(loading_door_id: int = None, db: Session = Depends(get_db)):
    q = db.query(PrintroomEntry)
    if loading_door_id is not None:
        q = q.filter(PrintroomEntry.loading_door_id == loading_door_id)
    return q.order_by(PrintroomEntry.loading_door_id, PrintroomEntry.batch_number, PrintroomEntry.row_order).all()


@router.put("/printroom/{entry_id}", response_model=ExecutionReportOut, summary="Edit an entry (runs automation)")
async def update_entry(entry_id: int, body: PrintroomEntryUpdate, db: Session = Depends(get_db)):
    entry = db.query(PrintroomEntry).filter(PrintroomEntry.id == entry_id).first()
    if not entry:
        raise HTTPException(status_code=404, detail="Entry not found")
    report = await movement_service.update_entry(db, entry, body.model_dump(exclude_unset=True))
    return ExecutionReportOut.from_report(report)


@router.post("/printroom/end-marker", response_model=ExecutionReportOut, summary="Close a batch (runs automation)")
async def add_end_marker(body: EndMarkerCreate, db: Session = Depends(get_db)):
    _, report = await movement_service.add_end_marker(db, body.loading_door_id, body.batch_number)
    return ExecutionReportOut.from_report(report)


@router.delete("/printroom/{entry_id}", summary="Delete an entry")
def delete_entry(entry_id: int, db: Session = Depends(get_db)):
    entry = db.query(PrintroomEntry).filter(PrintroomEntry.id == entry_id).first()
    if not entry:
        raise HTTPException(status_code=404, detail="Entry not found")
    movement_service.delete_entry(db, entry)
    return {"id": entry_id, "status": "deleted"}


@router.put("/staging/{door_id}", response_model=ExecutionReportOut, summary="Set preshift front/back truck")
async def update_staging(door_id: int, body: StagingPositionUpdate, db: Session = Depends(get_db)):
    door = db.query(StagingDoor).filter(StagingDoor.id == door_id).first()
    if not door:
        raise HTTPException(status_code=404, detail="Staging door not found")
    try:
        report = await movement_service.update_staging_door(db, door, body.position, body.truck_number)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return ExecutionReportOut.from_report(report)
