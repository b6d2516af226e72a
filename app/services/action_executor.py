# app/services/action_executor.py
"""
Applies automation Actions to the database, one at a time.

Each action commits on its own. An unresolved status name or an untracked
truck skips that action. Preshift actions (only_if_tracked) are checked
against the board before anything else is resolved. A storage error
rolls back that action only. Neither stops the remaining actions in the
batch — everything is reported back in an ExecutionReport.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.exceptions import DispatchError, StorageWriteError, UnresolvedReferenceError
from app.models.live_movement import LiveMovement
from app.models.loading_door import LoadingDoor
from app.models.status_value import StatusValue
from app.services.automation_engine import Action, ActionType
from app.utils.logger import get_logger

logger = get_logger(__name__)

APPLIED = "applied"
SKIPPED = "skipped"
FAILED = "failed"


@dataclass
class ActionResult:
    action: Action
    outcome: str
    error: Optional[DispatchError] = None
    new_status: Optional[str] = None       # set when a truck status actually changed
    location: Optional[str] = None


@dataclass
class ExecutionReport:
    results: list[ActionResult] = field(default_factory=list)

    @property
    def applied(self) -> list[ActionResult]:
        return [r for r in self.results if r.outcome == APPLIED]

    @property
    def skipped(self) -> list[ActionResult]:
        return [r for r in self.results if r.outcome == SKIPPED]

    @property
    def failed(self) -> list[ActionResult]:
        return [r for r in self.results if r.outcome == FAILED]

    @property
    def status_changes(self) -> list[ActionResult]:
        return [r for r in self.applied if r.new_status]


def find_status(db: Session, name: str) -> Optional[StatusValue]:
    """Case-insensitive exact lookup of a status by name."""
    return (
        db.query(StatusValue)
        .filter(func.lower(StatusValue.status_name) == (name or "").strip().lower())
        .first()
    )


def _is_tracked(db: Session, truck_number: Optional[str]) -> bool:
    if not truck_number:
        return False
    return db.query(LiveMovement).filter(LiveMovement.truck_number == truck_number).first() is not None


def _movement_row(db: Session, truck_number: Optional[str]) -> LiveMovement:
    row = None
    if truck_number:
        row = db.query(LiveMovement).filter(LiveMovement.truck_number == truck_number).first()
    if row is None:
        raise UnresolvedReferenceError("truck", truck_number or "")
    return row


def _set_truck_status(db: Session, action: Action) -> ActionResult:
    status = find_status(db, action.value)
    if status is None:
        raise UnresolvedReferenceError("status", action.value)
    row = _movement_row(db, action.truck_number)
    row.status_id = status.id
    row.last_updated = datetime.utcnow()
    return ActionResult(action, APPLIED, new_status=status.status_name, location=row.current_location)


def _set_truck_location(db: Session, action: Action) -> ActionResult:
    row = _movement_row(db, action.truck_number)
    row.current_location = action.value
    row.last_updated = datetime.utcnow()
    return ActionResult(action, APPLIED, location=action.value)


def _set_door_status(db: Session, action: Action) -> ActionResult:
    door = db.query(LoadingDoor).filter(LoadingDoor.id == action.door_id).first()
    if door is None:
        raise UnresolvedReferenceError("door", str(action.door_id))
    door.door_status = action.value
    return ActionResult(action, APPLIED)


_HANDLERS = {
    ActionType.SET_TRUCK_STATUS: _set_truck_status,
    ActionType.SET_TRUCK_LOCATION: _set_truck_location,
    ActionType.SET_DOOR_STATUS: _set_door_status,
}


def apply_action(db: Session, action: Action) -> ActionResult:
    """Apply and commit a single action. Never raises for engine errors."""
    handler = _HANDLERS.get(action.action_type)
    if handler is None:
        logger.warning(f"[ACTION] No handler for {action.action_type!r} — no-op")
        return ActionResult(action, SKIPPED)

    if action.only_if_tracked and not _is_tracked(db, action.truck_number):
        logger.debug(f"[ACTION] {action.truck_number} not on the board, {action} left alone")
        return ActionResult(action, SKIPPED, error=UnresolvedReferenceError("truck", action.truck_number or ""))

    try:
        result = handler(db, action)
        db.commit()
    except UnresolvedReferenceError as e:
        db.rollback()
        logger.warning(f"[ACTION] Skipped {action} from rule '{action.rule_name}': {e}")
        return ActionResult(action, SKIPPED, error=e)
    except SQLAlchemyError as e:
        db.rollback()
        err = StorageWriteError(f"{action} failed: {e}", cause=e)
        logger.error(f"[ACTION] {err}")
        return ActionResult(action, FAILED, error=err)

    logger.info(f"[ACTION] Applied {action} (rule '{action.rule_name}')")
    return result


def apply_actions(db: Session, actions: list[Action]) -> ExecutionReport:
    """Apply actions in the order given; later actions run even if earlier ones fail."""
    report = ExecutionReport()
    for action in actions:
        report.results.append(apply_action(db, action))
    if report.failed:
        logger.error(f"[ACTION] {len(report.failed)}/{len(actions)} action(s) failed to persist")
    return report
