# app/services/notification_dispatcher.py
"""
Turns a matched subscriber set into in-app notifications, SMS and e-mail.
Best effort: one recipient failing never stops the others and never
raises to the caller. Outcomes are counted in a DispatchResult.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Mapping, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import settings
from app.exceptions import DeliveryError
from app.models.notification import Notification
from app.services import subscription_matcher
from app.services.mail_service import MailSender
from app.services.message_builder import email_subject
from app.services.truck_identity import normalize
from app.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class DispatchResult:
    notified: int = 0
    sms_sent: int = 0
    sms_failures: list[str] = field(default_factory=list)
    sms_recipients: list[str] = field(default_factory=list)
    email_sent: int = 0
    email_failures: list[str] = field(default_factory=list)
    email_recipients: list[str] = field(default_factory=list)


def _persist_app_notifications(db: Session, recipients: list, truck_number: str, message: str) -> int:
    if not recipients:
        return 0
    key = normalize(truck_number).key
    now = datetime.utcnow()
    try:
        for sub in recipients:
            db.add(Notification(user_id=sub.user_id, truck_number=key, message=message,
                                type="status_change", is_read=False, created_at=now))
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"[NOTIFY] Could not store {len(recipients)} in-app notification(s): {e}")
        return 0
    return len(recipients)


def _send_all(sender: MailSender, addresses: list[str], subject: str, text: str,
              sent: list[str], failures: list[str], tag: str) -> None:
    for to in addresses:
        try:
            sender.send(to, subject, text)
            sent.append(to)
            logger.info(f"[{tag}] Sent to {to}")
        except DeliveryError as e:
            failures.append(to)
            logger.error(f"[{tag}] {e}")


def dispatch(db: Session, matched: list, message: str, truck_number: str,
             prefs: Optional[Mapping] = None, sender: Optional[MailSender] = None,
             gateways: Optional[Mapping[str, str]] = None) -> DispatchResult:
    """
    matched: output of subscription_matcher.match (already de-duplicated).
    prefs:   {user_id: NotificationPreference}; missing users default to all-on.
    """
    prefs = prefs or {}
    gateways = gateways if gateways is not None else settings.SMS_GATEWAYS
    result = DispatchResult()

    wanted = subscription_matcher.wants_truck_status(matched, prefs)
    if not wanted:
        return result

    result.notified = _persist_app_notifications(
        db, subscription_matcher.app_recipients(wanted, prefs), truck_number, message)

    sms_to = subscription_matcher.sms_recipients(wanted, prefs, gateways) if settings.SMS_ENABLED else []
    email_to = subscription_matcher.email_recipients(wanted) if settings.EMAIL_ENABLED else []
    if sms_to or email_to:
        sender = sender or MailSender()
        _send_all(sender, sms_to, message, message, result.sms_recipients, result.sms_failures, "SMS")
        _send_all(sender, email_to, email_subject(truck_number), message,
                  result.email_recipients, result.email_failures, "EMAIL")
    result.sms_sent = len(result.sms_recipients)
    result.email_sent = len(result.email_recipients)

    logger.info(f"[NOTIFY] {truck_number}: app={result.notified} sms={result.sms_sent} "
                f"(failed {len(result.sms_failures)}) email={result.email_sent}")
    return result
