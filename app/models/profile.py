# app/models/profile.py
"""
User profiles — only the contact fields the notification flow needs.
Authentication lives elsewhere; user_id is an opaque string.
"""

from sqlalchemy import Boolean, Column, String
from app.database import Base


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(String(64), primary_key=True)          # user id
    username = Column(String(100), unique=True)
    display_name = Column(String(200))
    phone = Column(String(20))                          # digits only, used for SMS gateway address
    carrier = Column(String(30))                        # key into settings.SMS_GATEWAYS
    sms_enabled = Column(Boolean, nullable=False, default=False)
    notify_email = Column(Boolean, nullable=False, default=False)
    notify_email_address = Column(String(200))

    def __repr__(self):
        return f"<Profile {self.id} {self.username}>"
