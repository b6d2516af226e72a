# app/models/automation_rule.py
"""
Automation rules table — operator-editable "when X then Y" rules.
Read by automation_service (ordered by priority, active only).
trigger_type / action_type are stored as free strings so rules written
for a newer engine never crash an older one.
"""

from sqlalchemy import Boolean, Column, Integer, String, Text
from app.database import Base


class AutomationRule(Base):
    __tablename__ = "automation_rules"

    id = Column(Integer, primary_key=True, autoincrement=True)
    rule_name = Column(String(200), nullable=False)
    description = Column(Text)
    trigger_type = Column(String(50), nullable=False, index=True)  # see TriggerType
    trigger_value = Column(String(200))
    action_type = Column(String(50), nullable=False)               # see ActionType
    action_value = Column(String(200), nullable=False, default="")
    priority = Column(Integer, nullable=False, default=0, index=True)  # lower runs first
    is_active = Column(Boolean, nullable=False, default=True, index=True)

    def __repr__(self):
        return f"<AutomationRule {self.id} {self.trigger_type}->{self.action_type} prio={self.priority}>"
