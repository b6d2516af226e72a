# app/models/printroom_entry.py
"""
Printroom entries — one row per truck queued at a loading door.
Rows are grouped into numbered batches per door and ordered by row_order.
An end marker row (truck_number="end") closes a batch.
"""

from datetime import datetime
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from app.database import Base


class PrintroomEntry(Base):
    __tablename__ = "printroom_entries"

    id = Column(Integer, primary_key=True, autoincrement=True)
    loading_door_id = Column(Integer, ForeignKey("loading_doors.id"), nullable=False, index=True)
    batch_number = Column(Integer, nullable=False, default=1)
    row_order = Column(Integer, nullable=False, default=1)
    route_info = Column(String(200))
    truck_number = Column(String(50), index=True)   # raw operator input: 170, TR170-1, gap, end
    pods = Column(Integer, nullable=False, default=0)
    pallets_trays = Column(Integer, nullable=False, default=0)
    notes = Column(Text)
    is_end_marker = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    def __repr__(self):
        return (f"<PrintroomEntry {self.id} door={self.loading_door_id} "
                f"batch={self.batch_number} row={self.row_order} truck={self.truck_number}>")
