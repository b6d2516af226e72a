# app/services/automation_engine.py
"""
Rule evaluator — pure, no DB access.

Given one printroom StateChangeEvent and the rule set, decides which rules
fire and returns the Actions they produce. Nothing is written here: the
caller applies the returned batch via action_executor, so every rule in a
pass sees the same snapshot of state.

Lookups the evaluator needs (current status, sibling rows, later batches)
come in through an AutomationLookups object. automation_service supplies a
DB-backed one, tests supply StaticLookups.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional, Protocol

from app.utils.logger import get_logger

logger = get_logger(__name__)


class TriggerType(str, Enum):
    TRUCK_NUMBER_EQUALS = "truck_number_equals"
    TRUCK_NUMBER_CONTAINS = "truck_number_contains"
    TRUCK_IS_END_MARKER = "truck_is_end_marker"
    IS_LAST_TRUCK_WITH_STATUS = "is_last_truck_with_status"
    STATUS_EQUALS = "status_equals"
    # Preshift pass only (see evaluate_preshift)
    PRESHIFT_IN_FRONT = "preshift_in_front"
    PRESHIFT_IN_BACK = "preshift_in_back"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["TriggerType"]:
        """Unknown trigger strings map to None (rule never fires)."""
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return None


class ActionType(str, Enum):
    SET_TRUCK_STATUS = "set_truck_status"
    SET_DOOR_STATUS = "set_door_status"
    SET_TRUCK_LOCATION = "set_truck_location"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["ActionType"]:
        """Unknown action strings map to None (action is a no-op)."""
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return None


PRESHIFT_TRIGGERS = {TriggerType.PRESHIFT_IN_FRONT, TriggerType.PRESHIFT_IN_BACK}


@dataclass(frozen=True)
class StateChangeEvent:
    truck_number: Optional[str]
    door_id: int
    is_end_marker: bool = False
    batch_number: int = 1
    row_order: int = 1

    @classmethod
    def from_entry(cls, entry) -> "StateChangeEvent":
        """Build from a PrintroomEntry (or anything with the same attributes)."""
        return cls(
            truck_number=entry.truck_number,
            door_id=entry.loading_door_id,
            is_end_marker=bool(entry.is_end_marker),
            batch_number=entry.batch_number,
            row_order=entry.row_order,
        )


@dataclass(frozen=True)
class SiblingEntry:
    row_order: int
    truck_number: Optional[str] = None
    is_end_marker: bool = False


@dataclass(frozen=True)
class Action:
    action_type: ActionType
    value: str
    truck_number: Optional[str] = None
    door_id: Optional[int] = None
    rule_id: Optional[int] = None
    rule_name: str = ""
    only_if_tracked: bool = False   # preshift: never create/touch untracked trucks

    def __str__(self):
        target = f"door={self.door_id}" if self.action_type == ActionType.SET_DOOR_STATUS else f"truck={self.truck_number}"
        return f"{self.action_type.value}({target}, {self.value!r})"


class AutomationLookups(Protocol):
    def current_status(self, truck_number: str) -> Optional[str]: ...

    def sibling_entries(self, door_id: int, batch_number: int) -> list[SiblingEntry]: ...

    def higher_batch_count(self, door_id: int, batch_number: int) -> int: ...


@dataclass
class StaticLookups:
    """In-memory lookups: statuses by truck, siblings by (door, batch)."""
    statuses: dict[str, str] = field(default_factory=dict)
    siblings: dict[tuple[int, int], list[SiblingEntry]] = field(default_factory=dict)

    def current_status(self, truck_number: str) -> Optional[str]:
        return self.statuses.get(truck_number)

    def sibling_entries(self, door_id: int, batch_number: int) -> list[SiblingEntry]:
        return sorted(self.siblings.get((door_id, batch_number), []), key=lambda s: s.row_order)

    def higher_batch_count(self, door_id: int, batch_number: int) -> int:
        return sum(len(rows) for (door, batch), rows in self.siblings.items()
                   if door == door_id and batch > batch_number)


class _PassSnapshot:
    """Memoizes lookups for one evaluation pass so every rule sees the same values."""

    def __init__(self, event: StateChangeEvent, lookups: AutomationLookups):
        self._event = event
        self._lookups = lookups
        self._status: Optional[str] = None
        self._status_loaded = False
        self._is_last: Optional[bool] = None

    @property
    def status(self) -> str:
        if not self._status_loaded:
            self._status = self._lookups.current_status(self._event.truck_number or "") or ""
            self._status_loaded = True
        return self._status

    @property
    def is_last_in_door(self) -> bool:
        if self._is_last is None:
            e = self._event
            later = [s for s in self._lookups.sibling_entries(e.door_id, e.batch_number)
                     if s.row_order > e.row_order]
            self._is_last = not later and self._lookups.higher_batch_count(e.door_id, e.batch_number) == 0
        return self._is_last


def sort_rules(rules: Iterable) -> list:
    """Active rules only, ascending priority. sorted() is stable, so ties keep input order."""
    return sorted((r for r in rules if r.is_active), key=lambda r: r.priority or 0)


def _fires(trigger: Optional[TriggerType], rule, event: StateChangeEvent, snap: _PassSnapshot) -> bool:
    truck = (event.truck_number or "").strip().lower()
    wanted = (rule.trigger_value or "").strip().lower()

    if trigger == TriggerType.TRUCK_NUMBER_EQUALS:
        # Raw identifier as typed: "tr170" != "170"
        return truck == wanted
    if trigger == TriggerType.TRUCK_NUMBER_CONTAINS:
        return wanted in truck
    if trigger == TriggerType.TRUCK_IS_END_MARKER:
        return event.is_end_marker
    if trigger == TriggerType.IS_LAST_TRUCK_WITH_STATUS:
        return wanted == "end" and event.is_end_marker and snap.is_last_in_door
    if trigger == TriggerType.STATUS_EQUALS:
        return snap.status.lower() == wanted
    # Unknown or preshift-only trigger
    return False


def evaluate(event: StateChangeEvent, rules: Iterable, lookups: AutomationLookups) -> list[Action]:
    """
    One pass over all rules for one event. Returns actions in priority order.
    Every rule is checked independently; there is no stop-on-first-match.
    """
    snap = _PassSnapshot(event, lookups)
    actions: list[Action] = []

    for rule in sort_rules(rules):
        trigger = TriggerType.parse(rule.trigger_type)
        if trigger is None:
            logger.debug(f"[AUTOMATION] Rule '{rule.rule_name}' has unknown trigger {rule.trigger_type!r} — ignored")
            continue
        if not _fires(trigger, rule, event, snap):
            continue

        action_type = ActionType.parse(rule.action_type)
        if action_type is None:
            logger.warning(f"[AUTOMATION] Rule '{rule.rule_name}' fired but action {rule.action_type!r} is unknown — no-op")
            continue

        logger.info(f"[AUTOMATION] Rule '{rule.rule_name}' fired for truck={event.truck_number} door={event.door_id}")
        actions.append(Action(
            action_type=action_type,
            value=rule.action_value or "",
            truck_number=event.truck_number,
            door_id=event.door_id,
            rule_id=rule.id,
            rule_name=rule.rule_name or "",
        ))
    return actions


def evaluate_preshift(rules: Iterable, staging_doors: Iterable) -> list[Action]:
    """
    Preshift pass: preshift_in_front / preshift_in_back rules fire once per
    staging door holding a truck in that position. Rule-major order, then
    door order as given. Door status actions have no target here and are dropped.
    """
    doors = list(staging_doors)
    actions: list[Action] = []

    for rule in sort_rules(rules):
        trigger = TriggerType.parse(rule.trigger_type)
        if trigger not in PRESHIFT_TRIGGERS:
            continue
        action_type = ActionType.parse(rule.action_type)
        if action_type not in (ActionType.SET_TRUCK_STATUS, ActionType.SET_TRUCK_LOCATION):
            continue

        for door in doors:
            truck = door.in_front if trigger == TriggerType.PRESHIFT_IN_FRONT else door.in_back
            if not truck:
                continue
            actions.append(Action(
                action_type=action_type,
                value=rule.action_value or "",
                truck_number=truck,
                rule_id=rule.id,
                rule_name=rule.rule_name or "",
                only_if_tracked=True,
            ))
    if actions:
        logger.info(f"[AUTOMATION] Preshift pass produced {len(actions)} action(s)")
    return actions
