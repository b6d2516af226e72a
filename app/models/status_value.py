# app/models/status_value.py
"""
Truck status lookup table (On Route, Staged, Loading, Gap, ...).
Actions resolve status names against this table case-insensitively.
"""

from sqlalchemy import Boolean, Column, Integer, String
from app.database import Base


class StatusValue(Base):
    __tablename__ = "status_values"

    id = Column(Integer, primary_key=True, autoincrement=True)
    status_name = Column(String(100), unique=True, nullable=False, index=True)
    status_color = Column(String(20), nullable=False, default="#6b7280")
    sort_order = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)

    def __repr__(self):
        return f"<StatusValue {self.id} {self.status_name}>"
