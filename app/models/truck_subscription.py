# app/models/truck_subscription.py
"""
Truck subscriptions — a user opting in to status changes for a truck.
truck_number is raw: "170" (whole tractor, every trailer) or "170-2"
(one trailer slot only).
"""

from sqlalchemy import Boolean, Column, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship
from app.database import Base


class TruckSubscription(Base):
    __tablename__ = "truck_subscriptions"
    __table_args__ = (UniqueConstraint("user_id", "truck_number", name="uq_subscription_user_truck"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(64), ForeignKey("profiles.id"), nullable=False, index=True)
    truck_number = Column(String(50), nullable=False, index=True)
    notify_app = Column(Boolean, nullable=False, default=True)
    notify_sms = Column(Boolean, nullable=False, default=False)
    notify_email = Column(Boolean, nullable=False, default=False)

    profile = relationship("Profile", lazy="joined")

    def __repr__(self):
        return f"<TruckSubscription user={self.user_id} truck={self.truck_number}>"
