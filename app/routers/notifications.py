# app/routers/notifications.py
"""Truck subscriptions, the notify-truck hook and the in-app notification bell."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from app.database import get_db
from app.models.notification import Notification
from app.models.truck_subscription import TruckSubscription
from app.schemas.notification import (
    DispatchResultOut,
    NotificationOut,
    NotifyTruckRequest,
    SubscriptionCreate,
    SubscriptionFlags,
    SubscriptionOut,
)
from app.services.notify_service import notify_truck_status_change
from app.services.truck_identity import strip_prefix

router = APIRouter()


@router.post("/notify-truck", response_model=DispatchResultOut, summary="Notify subscribers of a status change")
async def notify_truck(body: NotifyTruckRequest, db: Session = Depends(get_db)):
    if not body.truck_number.strip() or not body.new_status.strip():
        raise HTTPException(status_code=400, detail="truck_number and new_status required")
    return await notify_truck_status_change(db, body.truck_number, body.new_status,
                                            location=body.location, changed_by=body.changed_by)


# ── Subscriptions ────────────────────────────────────────────────────────────

@router.get("/users/{user_id}/subscriptions", response_model=list[SubscriptionOut])
def list_subscriptions(user_id: str, db: Session = Depends(get_db)):
    return db.query(TruckSubscription).filter(TruckSubscription.user_id == user_id).all()


@router.post("/users/{user_id}/subscriptions", response_model=SubscriptionOut, summary="Subscribe to a truck")
def subscribe(user_id: str, body: SubscriptionCreate, db: Session = Depends(get_db)):
    truck = strip_prefix(body.truck_number)
    if not truck:
        raise HTTPException(status_code=400, detail="truck_number required")
    sub = TruckSubscription(user_id=user_id, truck_number=truck, notify_app=body.notify_app,
                            notify_sms=body.notify_sms, notify_email=body.notify_email)
    db.add(sub)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=400, detail=f"Already subscribed to {truck}")
    db.refresh(sub)
    return sub


@router.put("/users/{user_id}/subscriptions/{truck_number}", response_model=SubscriptionOut,
            summary="Change notify flags")
def update_subscription(user_id: str, truck_number: str, body: SubscriptionFlags, db: Session = Depends(get_db)):
    sub = db.query(TruckSubscription).filter(
        TruckSubscription.user_id == user_id, TruckSubscription.truck_number == strip_prefix(truck_number)
    ).first()
    if not sub:
        raise HTTPException(status_code=404, detail="Subscription not found")
    for name, value in body.model_dump(exclude_unset=True).items():
        setattr(sub, name, value)
    db.commit()
    db.refresh(sub)
    return sub


@router.delete("/users/{user_id}/subscriptions/{truck_number}", summary="Unsubscribe")
def unsubscribe(user_id: str, truck_number: str, db: Session = Depends(get_db)):
    deleted = db.query(TruckSubscription).filter(
        TruckSubscription.user_id == user_id, TruckSubscription.truck_number == strip_prefix(truck_number)
    ).delete()
    db.commit()
    if not deleted:
        raise HTTPException(status_code=404, detail="Subscription not found")
    return {"user_id": user_id, "truck_number": truck_number, "status": "removed"}


# ── Notification bell ────────────────────────────────────────────────────────

@router.get("/users/{user_id}/notifications", response_model=list[NotificationOut])
def list_notifications(user_id: str, unread_only: bool = False, limit: int = 50, db: Session = Depends(get_db)):
    q = db.query(Notification).filter(Notification.user_id == user_id)
    if unread_only:
        q = q.filter(Notification.is_read == False)  # noqa: E712
    return q.order_by(Notification.created_at.desc()).limit(limit).all()


@router.put("/users/{user_id}/notifications/read", summary="Mark all notifications read")
def mark_all_read(user_id: str, db: Session = Depends(get_db)):
    count = db.query(Notification).filter(
        Notification.user_id == user_id, Notification.is_read == False  # noqa: E712
    ).update({"is_read": True})
    db.commit()
    return {"user_id": user_id, "marked_read": count}
