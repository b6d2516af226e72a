"""Unit tests for the rule evaluator (pure, no DB)."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from unittest.mock import MagicMock
from app.models.automation_rule import AutomationRule
from app.models.staging_door import StagingDoor
from app.services.automation_engine import (
    Action,
    ActionType,
    SiblingEntry,
    StateChangeEvent,
    StaticLookups,
    TriggerType,
    evaluate,
    evaluate_preshift,
)


def make_rule(trigger_type="truck_number_contains", trigger_value="gap", action_type="set_truck_status",
              action_value="Gap", priority=10, is_active=True, rule_id=1, name="rule"):
    return AutomationRule(id=rule_id, rule_name=name, trigger_type=trigger_type, trigger_value=trigger_value,
                          action_type=action_type, action_value=action_value, priority=priority,
                          is_active=is_active)


def make_event(truck="170", door=1, end=False, batch=1, row=1):
    return StateChangeEvent(truck_number=truck, door_id=door, is_end_marker=end, batch_number=batch, row_order=row)


class TestTriggers:
    def test_contains_fires_for_gap_scenario(self):
        actions = evaluate(make_event("GAP1"), [make_rule()], StaticLookups())
        assert actions == [Action(ActionType.SET_TRUCK_STATUS, "Gap", truck_number="GAP1", door_id=1,
                                  rule_id=1, rule_name="rule")]

    def test_contains_does_not_fire_for_other_truck(self):
        assert evaluate(make_event("170"), [make_rule()], StaticLookups()) == []

    def test_equals_is_case_insensitive(self):
        rule = make_rule("truck_number_equals", "tr170-1")
        assert len(evaluate(make_event("TR170-1"), [rule], StaticLookups())) == 1

    def test_equals_compares_identifier_as_typed(self):
        rule = make_rule("truck_number_equals", "170-1")
        assert evaluate(make_event("TR170-1"), [rule], StaticLookups()) == []
        assert len(evaluate(make_event("170-1"), [rule], StaticLookups())) == 1

    def test_equals_does_not_strip_tr_prefix(self):
        assert evaluate(make_event("170"), [make_rule("truck_number_equals", "TR170")], StaticLookups()) == []
        assert evaluate(make_event("TR170"), [make_rule("truck_number_equals", "170")], StaticLookups()) == []

    def test_equals_respects_slot_suffix(self):
        rule = make_rule("truck_number_equals", "170")
        assert evaluate(make_event("170-1"), [rule], StaticLookups()) == []

    def test_end_marker_trigger(self):
        rule = make_rule("truck_is_end_marker", None, "set_door_status", "End Of Tote")
        assert evaluate(make_event("end", end=True), [rule], StaticLookups())[0].value == "End Of Tote"
        assert evaluate(make_event("170", end=False), [rule], StaticLookups()) == []

    def test_status_equals_uses_current_status(self):
        rule = make_rule("status_equals", "loading", "set_truck_location", "Dock")
        lookups = StaticLookups(statuses={"170": "Loading"})
        assert len(evaluate(make_event("170"), [rule], lookups)) == 1
        assert evaluate(make_event("171"), [rule], lookups) == []


class TestLastTruckWithStatus:
    def _lookups(self):
        return StaticLookups(siblings={
            (1, 1): [SiblingEntry(1, "170"), SiblingEntry(2, "171"), SiblingEntry(3, "end", True)],
            (1, 2): [SiblingEntry(1, "172"), SiblingEntry(2, "end", True)],
        })

    def test_not_last_when_later_batch_exists(self):
        rule = make_rule("is_last_truck_with_status", "END", "set_door_status", "Done for Night")
        event = make_event("end", door=1, end=True, batch=1, row=3)
        assert evaluate(event, [rule], self._lookups()) == []

    def test_fires_on_final_end_marker(self):
        rule = make_rule("is_last_truck_with_status", "end", "set_door_status", "Done for Night")
        event = make_event("end", door=1, end=True, batch=2, row=2)
        actions = evaluate(event, [rule], self._lookups())
        assert [a.value for a in actions] == ["Done for Night"]

    def test_not_last_when_later_row_in_same_batch(self):
        rule = make_rule("is_last_truck_with_status", "END", "set_door_status", "Done")
        event = make_event("end", door=1, end=True, batch=2, row=1)
        assert evaluate(event, [rule], self._lookups()) == []

    def test_requires_end_trigger_value(self):
        rule = make_rule("is_last_truck_with_status", "Loaded", "set_door_status", "Done")
        event = make_event("end", door=1, end=True, batch=2, row=2)
        assert evaluate(event, [rule], self._lookups()) == []


class TestOrderingAndFiltering:
    def test_priority_order_with_stable_ties(self):
        rules = [
            make_rule(action_value="B", priority=20, rule_id=2),
            make_rule(action_value="A", priority=10, rule_id=1),
            make_rule(action_value="C", priority=20, rule_id=3),
        ]
        actions = evaluate(make_event("gap"), rules, StaticLookups())
        assert [a.value for a in actions] == ["A", "B", "C"]

    def test_inactive_rule_never_fires(self):
        rules = [make_rule(is_active=False)]
        assert evaluate(make_event("gap"), rules, StaticLookups()) == []

    def test_unknown_trigger_and_action_are_ignored(self):
        rules = [
            make_rule(trigger_type="truck_weight_above", rule_id=1),
            make_rule(action_type="launch_rocket", rule_id=2),
            make_rule(rule_id=3),
        ]
        actions = evaluate(make_event("gap"), rules, StaticLookups())
        assert [a.rule_id for a in actions] == [3]

    def test_preshift_triggers_never_fire_on_printroom_events(self):
        rule = make_rule("preshift_in_front", None)
        assert evaluate(make_event("gap"), [rule], StaticLookups()) == []

    def test_lookups_read_once_per_pass(self):
        lookups = MagicMock()
        lookups.current_status.return_value = "Loading"
        rules = [make_rule("status_equals", "Loading", rule_id=i) for i in range(3)]
        actions = evaluate(make_event("170"), rules, lookups)
        assert len(actions) == 3
        lookups.current_status.assert_called_once_with("170")


class TestPreshift:
    def test_front_and_back_rules(self):
        doors = [
            StagingDoor(door_label="18A", door_number=18, door_side="A", in_front="170", in_back="171"),
            StagingDoor(door_label="18B", door_number=18, door_side="B", in_front=None, in_back="172"),
        ]
        rules = [
            make_rule("preshift_in_front", None, "set_truck_location", "Staged Front", priority=1, rule_id=1),
            make_rule("preshift_in_back", None, "set_truck_status", "Staged", priority=2, rule_id=2),
        ]
        actions = evaluate_preshift(rules, doors)
        assert [(a.truck_number, a.value) for a in actions] == [
            ("170", "Staged Front"), ("171", "Staged"), ("172", "Staged"),
        ]
        assert all(a.only_if_tracked for a in actions)
        assert all(a.door_id is None for a in actions)

    def test_door_status_action_dropped(self):
        doors = [StagingDoor(door_label="19A", door_number=19, door_side="A", in_front="180", in_back=None)]
        rules = [make_rule("preshift_in_front", None, "set_door_status", "Loading")]
        assert evaluate_preshift(rules, doors) == []


class TestKindParsing:
    def test_parse_is_case_insensitive(self):
        assert TriggerType.parse(" Truck_Number_Equals ") == TriggerType.TRUCK_NUMBER_EQUALS
        assert ActionType.parse("SET_DOOR_STATUS") == ActionType.SET_DOOR_STATUS

    def test_parse_unknown_is_none(self):
        assert TriggerType.parse("nope") is None
        assert ActionType.parse(None) is None
