# app/models/loading_door.py
"""
Loading doors (13A, 13B, ...). door_status is free text set by operators
or by set_door_status automation actions.
"""

from sqlalchemy import Boolean, Column, Integer, String
from app.database import Base


class LoadingDoor(Base):
    __tablename__ = "loading_doors"

    id = Column(Integer, primary_key=True, autoincrement=True)
    door_name = Column(String(20), unique=True, nullable=False)
    door_status = Column(String(100), nullable=False, default="Loading")
    dock_lock_status = Column(String(50))
    is_done_for_night = Column(Boolean, nullable=False, default=False)
    sort_order = Column(Integer, nullable=False, default=0)

    def __repr__(self):
        return f"<LoadingDoor {self.door_name} status={self.door_status}>"
