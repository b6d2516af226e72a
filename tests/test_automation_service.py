"""Unit tests for the automation service (single pass, bounded, best-effort notify)."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from unittest.mock import MagicMock, AsyncMock, patch
from app.models.automation_rule import AutomationRule
from app.models.printroom_entry import PrintroomEntry
from app.services.action_executor import APPLIED, ActionResult, ExecutionReport
from app.services.automation_engine import Action, ActionType, StateChangeEvent
from app.services.automation_service import (
    DbLookups,
    resync_printroom,
    run_automation,
    run_preshift_automation,
)


def make_rule(trigger_type="truck_number_contains", trigger_value="gap", action_type="set_truck_status",
              action_value="Gap", priority=10, rule_id=1):
    return AutomationRule(id=rule_id, rule_name=f"rule-{rule_id}", trigger_type=trigger_type,
                          trigger_value=trigger_value, action_type=action_type, action_value=action_value,
                          priority=priority, is_active=True)


def make_entry(truck="GAP1", door=1, batch=1, row=1, end=False):
    return PrintroomEntry(id=row, loading_door_id=door, batch_number=batch, row_order=row,
                          truck_number=truck, is_end_marker=end)


def status_report(truck="GAP1", status="Gap"):
    action = Action(ActionType.SET_TRUCK_STATUS, status, truck_number=truck, door_id=1, rule_name="r")
    return ExecutionReport(results=[ActionResult(action, APPLIED, new_status=status, location="Dr13A")])


class TestRunAutomation:
    @pytest.mark.asyncio
    async def test_fired_rule_applied_and_subscribers_notified(self):
        db = MagicMock()
        with patch("app.services.automation_service.apply_actions", return_value=status_report()) as mock_apply, \
             patch("app.services.automation_service.notify_truck_status_change", new_callable=AsyncMock) as mock_notify:
            report = await run_automation(make_entry("GAP1"), db, rules=[make_rule()])

        actions = mock_apply.call_args.args[1]
        assert actions == [Action(ActionType.SET_TRUCK_STATUS, "Gap", truck_number="GAP1", door_id=1,
                                  rule_id=1, rule_name="rule-1")]
        mock_notify.assert_awaited_once_with(db, "GAP1", "Gap", location="Dr13A", changed_by="automation")
        assert len(report.applied) == 1

    @pytest.mark.asyncio
    async def test_nothing_fires_nothing_applied(self):
        db = MagicMock()
        with patch("app.services.automation_service.apply_actions") as mock_apply:
            report = await run_automation(make_entry("170"), db, rules=[make_rule()])
        mock_apply.assert_not_called()
        assert report.results == []

    @pytest.mark.asyncio
    async def test_depth_cap_stops_evaluation(self):
        db = MagicMock()
        with patch("app.services.automation_service.load_active_rules") as mock_rules:
            report = await run_automation(make_entry("GAP1"), db, depth=1)
        mock_rules.assert_not_called()
        db.query.assert_not_called()
        assert report.results == []

    @pytest.mark.asyncio
    async def test_accepts_state_change_event(self):
        db = MagicMock()
        event = StateChangeEvent(truck_number="gap", door_id=2)
        with patch("app.services.automation_service.apply_actions", return_value=ExecutionReport()) as mock_apply:
            await run_automation(event, db, rules=[make_rule()])
        assert mock_apply.call_args.args[1][0].door_id == 2

    @pytest.mark.asyncio
    async def test_notify_failure_does_not_raise(self):
        db = MagicMock()
        with patch("app.services.automation_service.apply_actions", return_value=status_report()), \
             patch("app.services.automation_service.notify_truck_status_change",
                   new_callable=AsyncMock, side_effect=RuntimeError("smtp exploded")):
            report = await run_automation(make_entry("GAP1"), db, rules=[make_rule()])
        assert len(report.applied) == 1


class TestResync:
    @pytest.mark.asyncio
    async def test_each_entry_evaluated_in_queue_order(self):
        entries = [make_entry("170", row=1), make_entry("171", row=2), make_entry("end", row=3, end=True)]
        db = MagicMock()
        db.query.return_value.filter.return_value.order_by.return_value.all.return_value = entries
        rules = [make_rule()]

        with patch("app.services.automation_service.load_active_rules", return_value=rules), \
             patch("app.services.automation_service.run_automation",
                   new_callable=AsyncMock, return_value=status_report()) as mock_run:
            report = await resync_printroom(db)

        assert [c.args[0] for c in mock_run.call_args_list] == entries
        assert all(c.kwargs["rules"] is rules for c in mock_run.call_args_list)
        assert len(report.results) == 3

    @pytest.mark.asyncio
    async def test_no_rules_no_work(self):
        db = MagicMock()
        with patch("app.services.automation_service.load_active_rules", return_value=[]):
            report = await resync_printroom(db)
        db.query.assert_not_called()
        assert report.results == []


class TestPreshiftAutomation:
    @pytest.mark.asyncio
    async def test_only_preshift_rules_used(self):
        rules = [make_rule(), make_rule("preshift_in_front", None, "set_truck_location", "Staged", rule_id=2)]
        door = MagicMock(in_front="170", in_back=None)
        db = MagicMock()
        db.query.return_value.order_by.return_value.all.return_value = [door]

        with patch("app.services.automation_service.load_active_rules", return_value=rules), \
             patch("app.services.automation_service.apply_actions", return_value=ExecutionReport()) as mock_apply:
            await run_preshift_automation(db)

        actions = mock_apply.call_args.args[1]
        assert [(a.truck_number, a.value, a.only_if_tracked) for a in actions] == [("170", "Staged", True)]

    @pytest.mark.asyncio
    async def test_preshift_rule_kind_matched_case_insensitively(self):
        rules = [make_rule(" PRESHIFT_IN_FRONT ", None, "SET_TRUCK_LOCATION", "Staged")]
        door = MagicMock(in_front="170", in_back=None)
        db = MagicMock()
        db.query.return_value.order_by.return_value.all.return_value = [door]

        with patch("app.services.automation_service.load_active_rules", return_value=rules), \
             patch("app.services.automation_service.apply_actions", return_value=ExecutionReport()) as mock_apply:
            await run_preshift_automation(db)

        mock_apply.assert_called_once()
        assert [(a.truck_number, a.action_type) for a in mock_apply.call_args.args[1]] == [
            ("170", ActionType.SET_TRUCK_LOCATION),
        ]


class TestDbLookups:
    def test_current_status_reads_board(self):
        db = MagicMock()
        db.query.return_value.filter.return_value.first.return_value = MagicMock(status_name="Loading")
        assert DbLookups(db).current_status("170") == "Loading"

    def test_current_status_missing_truck(self):
        db = MagicMock()
        db.query.return_value.filter.return_value.first.return_value = None
        assert DbLookups(db).current_status("170") is None

    def test_higher_batch_count(self):
        db = MagicMock()
        db.query.return_value.filter.return_value.count.return_value = 2
        assert DbLookups(db).higher_batch_count(1, 1) == 2

    def test_sibling_entries(self):
        db = MagicMock()
        db.query.return_value.filter.return_value.order_by.return_value.all.return_value = [
            make_entry("170", row=1), make_entry("end", row=2, end=True),
        ]
        siblings = DbLookups(db).sibling_entries(1, 1)
        assert [(s.row_order, s.is_end_marker) for s in siblings] == [(1, False), (2, True)]
