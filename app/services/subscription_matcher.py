# app/services/subscription_matcher.py
"""
Decides who hears about a truck status change.

A base-level subscription ("170") covers the tractor and every trailer
slot on it. A trailer-specific one ("170-2") covers only that slot.
Each user is notified at most once per event, even when several of their
subscriptions match.

All functions here are pure: subscriptions, preferences and gateways are
passed in. Subscriptions are TruckSubscription rows (or anything with
user_id / truck_number / notify_* attributes and an optional .profile).
"""

from typing import Iterable, Mapping, Optional

from app.services.truck_identity import TruckIdentity, normalize


def subscription_matches(identity: TruckIdentity, subject: Optional[str]) -> bool:
    sub = normalize(subject)
    if sub.is_trailer_specific:
        return sub == identity
    return sub.base == identity.base


def match(changed_truck: Optional[str], subscriptions: Iterable) -> list:
    """
    Subscriptions with notify_app set whose subject covers changed_truck,
    de-duplicated by user_id (first seen wins).
    """
    identity = normalize(changed_truck)
    seen: set = set()
    matched = []
    for sub in subscriptions:
        if not sub.notify_app:
            continue
        if not subscription_matches(identity, sub.truck_number):
            continue
        if sub.user_id in seen:
            continue
        seen.add(sub.user_id)
        matched.append(sub)
    return matched


def _pref(prefs: Mapping, user_id, flag: str) -> bool:
    p = prefs.get(user_id)
    # No preferences row yet means everything is on
    return True if p is None else bool(getattr(p, flag))


def wants_truck_status(matched: Iterable, prefs: Mapping) -> list:
    return [s for s in matched if _pref(prefs, s.user_id, "notify_truck_status")]


def app_recipients(matched: Iterable, prefs: Mapping) -> list:
    return [s for s in matched if _pref(prefs, s.user_id, "channel_app")]


def sms_address(subscription, gateways: Mapping[str, str]) -> Optional[str]:
    """
    "<phone>@<gateway>" when the subscription and its profile both allow SMS,
    the profile has a phone and a recognized carrier. Otherwise None.
    """
    if not subscription.notify_sms:
        return None
    profile = getattr(subscription, "profile", None)
    if profile is None or not profile.sms_enabled:
        return None
    phone = (profile.phone or "").strip()
    gateway = gateways.get((profile.carrier or "").strip().lower())
    if not phone or not gateway:
        return None
    return f"{phone}@{gateway}"


def sms_recipients(matched: Iterable, prefs: Mapping, gateways: Mapping[str, str]) -> list[str]:
    addresses = []
    for sub in matched:
        if not _pref(prefs, sub.user_id, "channel_sms"):
            continue
        addr = sms_address(sub, gateways)
        if addr:
            addresses.append(addr)
    return addresses


def email_recipients(matched: Iterable) -> list[str]:
    addresses = []
    for sub in matched:
        if not getattr(sub, "notify_email", False):
            continue
        profile = getattr(sub, "profile", None)
        if profile is None or not profile.notify_email:
            continue
        addr = (profile.notify_email_address or "").strip()
        if addr:
            addresses.append(addr)
    return addresses
