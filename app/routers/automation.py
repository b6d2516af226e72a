# app/routers/automation.py
"""Automation rules — CRUD + force re-sync of the whole printroom."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from app.database import get_db
from app.models.automation_rule import AutomationRule
from app.schemas.automation import (
    AutomationRuleCreate,
    AutomationRuleOut,
    AutomationRuleUpdate,
    ExecutionReportOut,
)
from app.services.automation_engine import ActionType, TriggerType
from app.services.automation_service import resync_printroom
from app.utils.logger import get_logger

router = APIRouter()
logger = get_logger(__name__)


def canonical_kinds(values: dict) -> dict:
    """
    Reject unknown kinds at write time and store the rest in their enum
    spelling ("PRESHIFT_IN_FRONT " -> "preshift_in_front"). Stored rules
    with unknown kinds are still tolerated by the evaluator.
    """
    for field, kind in (("trigger_type", TriggerType), ("action_type", ActionType)):
        if values.get(field) is None:
            continue
        parsed = kind.parse(values[field])
        if parsed is None:
            raise HTTPException(status_code=400, detail=f"Unknown {field} '{values[field]}'")
        values[field] = parsed.value
    return values


@router.get("/automation/rules", response_model=list[AutomationRuleOut], summary="List automation rules")
def list_rules(active_only: bool = False, db: Session = Depends(get_db)):
    q = db.query(AutomationRule)
    if active_only:
        q = q.filter(AutomationRule.is_active == True)  # noqa: E712
    return q.order_by(AutomationRule.priority, AutomationRule.id).all()


@router.post("/automation/rules", response_model=AutomationRuleOut, summary="Create a rule")
def create_rule(body: AutomationRuleCreate, db: Session = Depends(get_db)):
    rule = AutomationRule(**canonical_kinds(body.model_dump()))
    db.add(rule)
    db.commit()
    db.refresh(rule)
    logger.info(f"Rule created: {rule}")
    return rule


@router.put("/automation/rules/{rule_id}", response_model=AutomationRuleOut, summary="Edit a rule")
def update_rule(rule_id: int, body: AutomationRuleUpdate, db: Session = Depends(get_db)):
    rule = db.query(AutomationRule).filter(AutomationRule.id == rule_id).first()
    if not rule:
        raise HTTPException(status_code=404, detail="Rule not found")
    changes = canonical_kinds(body.model_dump(exclude_unset=True))
    for name, value in changes.items():
        setattr(rule, name, value)
    db.commit()
    db.refresh(rule)
    return rule


@router.delete("/automation/rules/{rule_id}", summary="Delete a rule")
def delete_rule(rule_id: int, db: Session = Depends(get_db)):
    rule = db.query(AutomationRule).filter(AutomationRule.id == rule_id).first()
    if not rule:
        raise HTTPException(status_code=404, detail="Rule not found")
    db.delete(rule)
    db.commit()
    return {"id": rule_id, "status": "deleted"}


@router.post("/automation/resync", response_model=ExecutionReportOut,
             summary="Re-run automation for every printroom entry")
async def resync(db: Session = Depends(get_db)):
    report = await resync_printroom(db)
    return ExecutionReportOut.from_report(report)
