# app/models/live_movement.py
"""
Live movement board — current status + location of every active truck.
Written by operators and by automation actions; every status change here
feeds the subscriber notification flow.
"""

from datetime import datetime
from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from app.database import Base


class LiveMovement(Base):
    __tablename__ = "live_movement"

    id = Column(Integer, primary_key=True, autoincrement=True)
    truck_number = Column(String(50), unique=True, nullable=False, index=True)
    current_location = Column(String(200))
    status_id = Column(Integer, ForeignKey("status_values.id"))
    in_front_of = Column(String(50))
    notes = Column(Text)
    loading_door_id = Column(Integer, ForeignKey("loading_doors.id"))
    last_updated = Column(DateTime, default=datetime.utcnow)

    status = relationship("StatusValue", lazy="joined")

    @property
    def status_name(self):
        return self.status.status_name if self.status else None

    def __repr__(self):
        return f"<LiveMovement {self.truck_number} status_id={self.status_id} @ {self.current_location}>"
