# app/models/notification.py
"""
In-app notifications (the bell) and per-user notification preferences.
A user without a preferences row gets every event on every channel.
"""

from datetime import datetime
from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text
from app.database import Base


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(64), nullable=False, index=True)
    truck_number = Column(String(50))
    message = Column(Text, nullable=False)
    type = Column(String(50), nullable=False, default="status_change")
    is_read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)

    def __repr__(self):
        return f"<Notification {self.id} user={self.user_id} read={self.is_read}>"


class NotificationPreference(Base):
    __tablename__ = "notification_preferences"

    user_id = Column(String(64), primary_key=True)
    notify_truck_status = Column(Boolean, nullable=False, default=True)
    notify_door_status = Column(Boolean, nullable=False, default=True)
    channel_app = Column(Boolean, nullable=False, default=True)
    channel_sms = Column(Boolean, nullable=False, default=True)

    def __repr__(self):
        return f"<NotificationPreference {self.user_id}>"
