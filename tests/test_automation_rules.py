"""Unit tests for rule kind validation on the automation rules API."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from fastapi import HTTPException
from app.routers.automation import canonical_kinds


class TestCanonicalKinds:
    def test_kinds_stored_in_enum_spelling(self):
        values = canonical_kinds({"trigger_type": " PRESHIFT_IN_FRONT ", "action_type": "Set_Truck_Status"})
        assert values == {"trigger_type": "preshift_in_front", "action_type": "set_truck_status"}

    def test_partial_update_leaves_missing_kinds_alone(self):
        assert canonical_kinds({"priority": 5}) == {"priority": 5}
        assert canonical_kinds({"action_type": "SET_DOOR_STATUS"}) == {"action_type": "set_door_status"}

    def test_unknown_trigger_rejected(self):
        with pytest.raises(HTTPException) as exc:
            canonical_kinds({"trigger_type": "truck_is_purple", "action_type": "set_truck_status"})
        assert exc.value.status_code == 400

    def test_unknown_action_rejected(self):
        with pytest.raises(HTTPException) as exc:
            canonical_kinds({"trigger_type": "status_equals", "action_type": "honk"})
        assert exc.value.status_code == 400
