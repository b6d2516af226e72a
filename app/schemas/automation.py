from pydantic import BaseModel
from typing import Optional


class AutomationRuleCreate(BaseModel):
    rule_name: str
    description: Optional[str] = None
    trigger_type: str         # truck_number_equals | truck_number_contains | truck_is_end_marker | ...
    trigger_value: Optional[str] = None
    action_type: str          # set_truck_status | set_door_status | set_truck_location
    action_value: str = ""
    priority: int = 0
    is_active: bool = True


class AutomationRuleUpdate(BaseModel):
    rule_name: Optional[str] = None
    description: Optional[str] = None
    trigger_type: Optional[str] = None
    trigger_value: Optional[str] = None
    action_type: Optional[str] = None
    action_value: Optional[str] = None
    priority: Optional[int] = None
    is_active: Optional[bool] = None


class AutomationRuleOut(BaseModel):
    id: int
    rule_name: str
    description: Optional[str]
    trigger_type: str
    trigger_value: Optional[str]
    action_type: str
    action_value: str
    priority: int
    is_active: bool

    class Config:
        from_attributes = True


class ActionResultOut(BaseModel):
    rule_name: str
    action: str
    outcome: str              # applied | skipped | failed
    error: Optional[str] = None


class ExecutionReportOut(BaseModel):
    applied: int
    skipped: int
    failed: int
    results: list[ActionResultOut]

    @classmethod
    def from_report(cls, report) -> "ExecutionReportOut":
        return cls(
            applied=len(report.applied),
            skipped=len(report.skipped),
            failed=len(report.failed),
            results=[
                ActionResultOut(rule_name=r.action.rule_name, action=str(r.action),
                                outcome=r.outcome, error=str(r.error) if r.error else None)
                for r in report.results
            ],
        )
