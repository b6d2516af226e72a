from pydantic import BaseModel
from datetime import datetime
from typing import Optional


class NotifyTruckRequest(BaseModel):
    truck_number: str
    new_status: str
    location: Optional[str] = None
    changed_by: Optional[str] = None


class DispatchResultOut(BaseModel):
    notified: int
    sms_sent: int
    sms_failures: list[str]
    sms_recipients: list[str]
    email_sent: int
    email_failures: list[str]
    email_recipients: list[str]

    class Config:
        from_attributes = True


class NotificationOut(BaseModel):
    id: int
    user_id: str
    truck_number: Optional[str]
    message: str
    type: str
    is_read: bool
    created_at: datetime

    class Config:
        from_attributes = True


class SubscriptionCreate(BaseModel):
    truck_number: str
    notify_app: bool = True
    notify_sms: bool = False
    notify_email: bool = False


class SubscriptionFlags(BaseModel):
    notify_app: Optional[bool] = None
    notify_sms: Optional[bool] = None
    notify_email: Optional[bool] = None


class SubscriptionOut(BaseModel):
    id: int
    user_id: str
    truck_number: str
    notify_app: bool
    notify_sms: bool
    notify_email: bool

    class Config:
        from_attributes = True
