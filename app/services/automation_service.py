# app/services/automation_service.py
"""
Runs automation rules after printroom / preshift writes.

One triggering write -> one evaluation over all active rules -> one batch
of actions -> done. Actions are never fed back into the evaluator; the
depth argument makes that explicit and is capped by MAX_AUTOMATION_DEPTH.
Truck status changes produced by actions are passed on to subscribers.
"""

from typing import Optional

from sqlalchemy.orm import Session

from app.config import settings
from app.models.automation_rule import AutomationRule
from app.models.live_movement import LiveMovement
from app.models.printroom_entry import PrintroomEntry
from app.models.staging_door import StagingDoor
from app.services.action_executor import ExecutionReport, apply_actions
from app.services.automation_engine import (
    PRESHIFT_TRIGGERS,
    SiblingEntry,
    StateChangeEvent,
    TriggerType,
    evaluate,
    evaluate_preshift,
)
from app.services.notify_service import notify_truck_status_change
from app.utils.logger import get_logger

logger = get_logger(__name__)

AUTOMATION_USER = "automation"


class DbLookups:
    """AutomationLookups backed by the live tables. No locks: best-effort snapshot."""

    def __init__(self, db: Session):
        self.db = db

    def current_status(self, truck_number: str) -> Optional[str]:
        row = self.db.query(LiveMovement).filter(LiveMovement.truck_number == truck_number).first()
        return row.status_name if row else None

    def sibling_entries(self, door_id: int, batch_number: int) -> list[SiblingEntry]:
        rows = (
            self.db.query(PrintroomEntry)
            .filter(PrintroomEntry.loading_door_id == door_id, PrintroomEntry.batch_number == batch_number)
            .order_by(PrintroomEntry.row_order)
            .all()
        )
        return [SiblingEntry(row_order=r.row_order, truck_number=r.truck_number,
                             is_end_marker=bool(r.is_end_marker)) for r in rows]

    def higher_batch_count(self, door_id: int, batch_number: int) -> int:
        return (
            self.db.query(PrintroomEntry)
            .filter(PrintroomEntry.loading_door_id == door_id, PrintroomEntry.batch_number > batch_number)
            .count()
        )


def load_active_rules(db: Session) -> list[AutomationRule]:
    return (
        db.query(AutomationRule)
        .filter(AutomationRule.is_active == True)  # noqa: E712
        .order_by(AutomationRule.priority, AutomationRule.id)
        .all()
    )


async def _notify_status_changes(db: Session, report: ExecutionReport):
    for r in report.status_changes:
        try:
            await notify_truck_status_change(db, r.action.truck_number, r.new_status,
                                             location=r.location, changed_by=AUTOMATION_USER)
        except Exception as e:
            # Notification is a side channel; the status write already succeeded
            logger.error(f"[AUTOMATION] Notify failed for {r.action.truck_number}: {e}", exc_info=True)


async def run_automation(entry, db: Session, depth: int = 0,
                         rules: Optional[list] = None) -> ExecutionReport:
    """Evaluate + apply for one printroom entry (PrintroomEntry or StateChangeEvent)."""
    if depth >= settings.MAX_AUTOMATION_DEPTH:
        logger.warning(f"[AUTOMATION] Depth {depth} reached cap {settings.MAX_AUTOMATION_DEPTH} — not evaluating")
        return ExecutionReport()

    event = entry if isinstance(entry, StateChangeEvent) else StateChangeEvent.from_entry(entry)
    if rules is None:
        rules = load_active_rules(db)
    if not rules:
        return ExecutionReport()

    actions = evaluate(event, rules, DbLookups(db))
    if not actions:
        return ExecutionReport()

    report = apply_actions(db, actions)
    await _notify_status_changes(db, report)
    return report


async def run_preshift_automation(db: Session) -> ExecutionReport:
    """Apply preshift_in_front / preshift_in_back rules across every staging door."""
    rules = [r for r in load_active_rules(db) if TriggerType.parse(r.trigger_type) in PRESHIFT_TRIGGERS]
    if not rules:
        return ExecutionReport()

    doors = db.query(StagingDoor).order_by(StagingDoor.door_number, StagingDoor.door_side).all()
    actions = evaluate_preshift(rules, doors)
    if not actions:
        return ExecutionReport()

    report = apply_actions(db, actions)
    await _notify_status_changes(db, report)
    return report


async def resync_printroom(db: Session) -> ExecutionReport:
    """
    Force re-sync: one independent pass per printroom entry, in door, batch,
    row order. Rules are loaded once for the whole sync.
    """
    rules = load_active_rules(db)
    combined = ExecutionReport()
    if not rules:
        return combined

    entries = (
        db.query(PrintroomEntry)
        .filter(PrintroomEntry.truck_number.isnot(None))
        .order_by(PrintroomEntry.loading_door_id, PrintroomEntry.batch_number, PrintroomEntry.row_order)
        .all()
    )
    for entry in entries:
        report = await run_automation(entry, db, rules=rules)
        combined.results.extend(report.results)

    logger.info(f"[AUTOMATION] Re-sync over {len(entries)} entries: applied={len(combined.applied)} "
                f"skipped={len(combined.skipped)} failed={len(combined.failed)}")
    return combined
