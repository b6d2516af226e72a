# app/models/staging_door.py
"""
Preshift staging doors (18A, 18B, ...). Each holds up to one truck in
front and one in back. Edits here run the preshift automation pass.
"""

from datetime import datetime
from sqlalchemy import Column, DateTime, Integer, String
from app.database import Base


class StagingDoor(Base):
    __tablename__ = "staging_doors"

    id = Column(Integer, primary_key=True, autoincrement=True)
    door_label = Column(String(10), unique=True, nullable=False)   # '18A', '18B'
    door_number = Column(Integer, nullable=False)
    door_side = Column(String(1), nullable=False)                  # A | B
    in_front = Column(String(50))
    in_back = Column(String(50))
    updated_at = Column(DateTime, default=datetime.utcnow)

    def __repr__(self):
        return f"<StagingDoor {self.door_label} front={self.in_front} back={self.in_back}>"
