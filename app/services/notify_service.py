# app/services/notify_service.py
"""
Shared truck-status notification flow.
Used by the movement router, the notify-truck endpoint and automation_service
whenever a truck's status changes.

    load subscriptions -> match (+dedupe) -> preferences -> message -> dispatch
"""

from typing import Optional

from sqlalchemy.orm import Session

from app.models.notification import NotificationPreference
from app.models.truck_subscription import TruckSubscription
from app.services import subscription_matcher
from app.services.mail_service import MailSender
from app.services.message_builder import status_message
from app.services.notification_dispatcher import DispatchResult, dispatch
from app.services.truck_identity import is_sentinel
from app.utils.logger import get_logger

logger = get_logger(__name__)


def load_preferences(db: Session, user_ids: list) -> dict:
    if not user_ids:
        return {}
    rows = db.query(NotificationPreference).filter(NotificationPreference.user_id.in_(user_ids)).all()
    return {p.user_id: p for p in rows}


async def notify_truck_status_change(db: Session, truck_number: str, new_status: str,
                                     location: Optional[str] = None, changed_by: Optional[str] = None,
                                     sender: Optional[MailSender] = None) -> DispatchResult:
    """Never raises for delivery problems; returns per-channel counts."""
    if not truck_number or is_sentinel(truck_number):
        return DispatchResult()

    subs = db.query(TruckSubscription).filter(TruckSubscription.notify_app == True).all()  # noqa: E712
    matched = subscription_matcher.match(truck_number, subs)
    if not matched:
        logger.debug(f"[NOTIFY] No subscribers for {truck_number}")
        return DispatchResult()

    prefs = load_preferences(db, [s.user_id for s in matched])
    message = status_message(truck_number, new_status, location, changed_by)
    return dispatch(db, matched, message, truck_number, prefs=prefs, sender=sender)
