# app/services/movement_service.py
"""
Printroom + live movement writes.

How it works:
  - Editing a printroom entry's truck number moves trucks on/off the live
    movement board (new truck gets DEFAULT_TRUCK_STATUS and its preshift
    spot as location; old truck is dropped once no entry references it)
  - Every printroom write then runs one automation pass for that entry
  - Operator status changes on the board go straight to subscribers
"""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from app.config import settings
from app.exceptions import UnresolvedReferenceError
from app.models.live_movement import LiveMovement
from app.models.loading_door import LoadingDoor
from app.models.printroom_entry import PrintroomEntry
from app.models.staging_door import StagingDoor
from app.services.action_executor import ExecutionReport, find_status
from app.services.message_builder import diff_announcements
from app.services.automation_service import run_automation, run_preshift_automation
from app.services.notification_dispatcher import DispatchResult
from app.services.notify_service import notify_truck_status_change
from app.services.truck_identity import END_MARKER, is_end_marker_text, same_truck
from app.utils.logger import get_logger

logger = get_logger(__name__)

EDITABLE_ENTRY_FIELDS = {"truck_number", "route_info", "pods", "pallets_trays", "notes"}


# ── Board membership ──────────────────────────────────────────────────────

def preshift_location(db: Session, truck_number: str) -> Optional[str]:
    """"Dr18A Front" / "Dr18A Back" when the truck is staged in preshift."""
    for sd in db.query(StagingDoor).order_by(StagingDoor.door_number, StagingDoor.door_side).all():
        if sd.in_front and same_truck(sd.in_front, truck_number):
            return f"Dr{sd.door_label} Front"
        if sd.in_back and same_truck(sd.in_back, truck_number):
            return f"Dr{sd.door_label} Back"
    return None


def add_to_movement(db: Session, truck_number: Optional[str]) -> Optional[LiveMovement]:
    """Put a truck on the board if it is not there yet. End markers never go on the board."""
    if not truck_number or is_end_marker_text(truck_number):
        return None
    existing = db.query(LiveMovement).filter(LiveMovement.truck_number == truck_number).first()
    if existing:
        return existing

    default_status = find_status(db, settings.DEFAULT_TRUCK_STATUS)
    row = LiveMovement(
        truck_number=truck_number,
        status_id=default_status.id if default_status else None,
        current_location=preshift_location(db, truck_number),
        last_updated=datetime.utcnow(),
    )
    db.add(row)
    db.commit()
    logger.info(f"[MOVEMENT] {truck_number} added @ {row.current_location}")
    return row


def remove_if_orphaned(db: Session, truck_number: Optional[str]) -> bool:
    """Drop a truck from the board once no printroom entry references it."""
    if not truck_number or is_end_marker_text(truck_number):
        return False
    remaining = db.query(PrintroomEntry).filter(PrintroomEntry.truck_number == truck_number).count()
    if remaining:
        return False
    db.query(LiveMovement).filter(LiveMovement.truck_number == truck_number).delete()
    db.commit()
    logger.info(f"[MOVEMENT] {truck_number} removed (no printroom entries left)")
    return True


# ── Printroom ─────────────────────────────────────────────────────────────

async def update_entry(db: Session, entry: PrintroomEntry, changes: dict) -> ExecutionReport:
    """Apply field changes to one entry, sync the board, run automation once."""
    old_truck = entry.truck_number
    for name, value in changes.items():
        if name not in EDITABLE_ENTRY_FIELDS:
            continue
        setattr(entry, name, value if value != "" else None)
    db.commit()

    if "truck_number" in changes and entry.truck_number != old_truck:
        if old_truck:
            remove_if_orphaned(db, old_truck)
        add_to_movement(db, entry.truck_number)

    return await run_automation(entry, db)


def _next_row_order(db: Session, door_id: int, batch_number: int) -> int:
    rows = (
        db.query(PrintroomEntry)
        .filter(PrintroomEntry.loading_door_id == door_id, PrintroomEntry.batch_number == batch_number)
        .all()
    )
    return max((r.row_order for r in rows), default=0) + 1


async def add_end_marker(db: Session, door_id: int, batch_number: int):
    """Close a batch with an end marker row and run automation for it."""
    entry = PrintroomEntry(
        loading_door_id=door_id,
        batch_number=batch_number,
        row_order=_next_row_order(db, door_id, batch_number),
        truck_number=END_MARKER,
        is_end_marker=True,
        created_at=datetime.utcnow(),
    )
    db.add(entry)
    db.commit()
    report = await run_automation(entry, db)
    return entry, report


def delete_entry(db: Session, entry: PrintroomEntry) -> None:
    truck = entry.truck_number
    db.delete(entry)
    db.commit()
    remove_if_orphaned(db, truck)


# ── Preshift staging ──────────────────────────────────────────────────────

async def update_staging_door(db: Session, door: StagingDoor, position: str,
                              truck_number: Optional[str]) -> ExecutionReport:
    """position is "in_front" or "in_back". Runs the preshift automation pass."""
    if position not in ("in_front", "in_back"):
        raise ValueError(f"Unknown staging position: {position}")
    setattr(door, position, truck_number or None)
    door.updated_at = datetime.utcnow()
    db.commit()
    return await run_preshift_automation(db)


# ── Live movement board ───────────────────────────────────────────────────

def _board_row(db: Session, truck_number: str) -> LiveMovement:
    row = db.query(LiveMovement).filter(LiveMovement.truck_number == truck_number).first()
    if row is None:
        raise UnresolvedReferenceError("truck", truck_number)
    return row


async def set_truck_status(db: Session, truck_number: str, status_name: str,
                           changed_by: Optional[str] = None) -> tuple[LiveMovement, DispatchResult]:
    """Operator status change. Raises UnresolvedReferenceError for unknown truck/status."""
    row = _board_row(db, truck_number)
    status = find_status(db, status_name)
    if status is None:
        raise UnresolvedReferenceError("status", status_name)

    row.status_id = status.id
    row.last_updated = datetime.utcnow()
    db.commit()
    logger.info(f"[MOVEMENT] {truck_number} -> {status.status_name} (by {changed_by or 'unknown'})")

    result = await notify_truck_status_change(db, truck_number, status.status_name,
                                              location=row.current_location, changed_by=changed_by)
    return row, result


def set_truck_location(db: Session, truck_number: str, location: Optional[str]) -> LiveMovement:
    row = _board_row(db, truck_number)
    row.current_location = location or None
    row.last_updated = datetime.utcnow()
    db.commit()
    return row


def set_door_status(db: Session, door_id: int, status: str) -> LoadingDoor:
    door = db.query(LoadingDoor).filter(LoadingDoor.id == door_id).first()
    if door is None:
        raise UnresolvedReferenceError("door", str(door_id))
    door.door_status = status
    db.commit()
    logger.info(f"[MOVEMENT] Door {door.door_name} -> {status}")
    return door


# ── Dashboard announcements ───────────────────────────────────────────────

def board_snapshot(db: Session) -> tuple[dict, dict]:
    """({door_name: door_status}, {truck_number: status_name}) as the dashboards see them."""
    doors = {d.door_name: d.door_status
             for d in db.query(LoadingDoor).order_by(LoadingDoor.sort_order, LoadingDoor.door_name).all()}
    trucks = {m.truck_number: m.status_name
              for m in db.query(LiveMovement).order_by(LiveMovement.truck_number).all()}
    return doors, trucks


def announcements_since(db: Session, prev_doors: dict, prev_trucks: dict):
    """Announcements for everything that changed since the caller's last snapshot."""
    doors, trucks = board_snapshot(db)
    announcements = diff_announcements(prev_doors or {}, doors, prev_trucks or {}, trucks)
    if announcements:
        logger.info(f"[MOVEMENT] {len(announcements)} announcement(s) since last snapshot")
    return announcements, doors, trucks
