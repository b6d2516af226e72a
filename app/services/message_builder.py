# app/services/message_builder.py
"""
Notification + announcement text.
The same body goes to the bell, SMS and e-mail, so tests can assert one string.
"""

from typing import Optional

from app.services.truck_identity import normalize


def status_message(truck_number: str, status: str,
                   location: Optional[str] = None, changed_by: Optional[str] = None) -> str:
    """ "TR170 (trailer 1): Loading @ Dr13A · dave" """
    msg = f"{normalize(truck_number).label}: {status}"
    if location:
        msg += f" @ {location}"
    if changed_by:
        msg += f" · {changed_by}"
    return msg


def email_subject(truck_number: str) -> str:
    return f"{normalize(truck_number).label} Status Update"


def door_announcement(door_name: str, status: str) -> str:
    return f"Door {door_name} is now {status}"


def truck_announcement(truck_number: str, status: Optional[str]) -> str:
    return f"Truck {truck_number}, {status or 'status unknown'}"


def diff_announcements(prev_doors: dict, doors: dict,
                       prev_trucks: dict, trucks: dict) -> list[str]:
    """
    Compare two dashboard snapshots ({door_name: status}, {truck: status})
    and announce every entry present in both whose status changed.
    Newly appearing entries are not announced.
    """
    out = []
    for name, status in doors.items():
        if name in prev_doors and prev_doors[name] != status:
            out.append(door_announcement(name, status))
    for truck, status in trucks.items():
        if truck in prev_trucks and (prev_trucks[truck] or "") != (status or ""):
            out.append(truck_announcement(truck, status))
    return out
