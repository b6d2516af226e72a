"""Unit tests for the truck-status notification flow."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from unittest.mock import MagicMock, patch
from app.models.notification import NotificationPreference
from app.models.truck_subscription import TruckSubscription
from app.services.notification_dispatcher import DispatchResult
from app.services.notify_service import notify_truck_status_change


def make_db(subs, prefs=()):
    rows = {TruckSubscription: list(subs), NotificationPreference: list(prefs)}
    db = MagicMock()
    db.query.side_effect = lambda model: MagicMock(**{"filter.return_value.all.return_value": rows[model]})
    return db


def sub(user_id, truck):
    s = TruckSubscription(user_id=user_id, truck_number=truck, notify_app=True, notify_sms=False, notify_email=False)
    s.profile = None
    return s


class TestNotifyTruckStatusChange:
    @pytest.mark.asyncio
    async def test_matched_users_deduplicated_and_message_built(self):
        db = make_db([sub("u1", "170"), sub("u1", "170-1"), sub("u2", "171")])

        with patch("app.services.notify_service.dispatch", return_value=DispatchResult(notified=1)) as mock_dispatch:
            result = await notify_truck_status_change(db, "TR170-1", "Loading", location="Dr13A", changed_by="dave")

        assert result.notified == 1
        args, kwargs = mock_dispatch.call_args
        matched, message, truck = args[1], args[2], args[3]
        assert [s.user_id for s in matched] == ["u1"]
        assert message == "TR170 (trailer 1): Loading @ Dr13A · dave"
        assert truck == "TR170-1"

    @pytest.mark.asyncio
    async def test_preferences_passed_through(self):
        pref = NotificationPreference(user_id="u1", notify_truck_status=True, channel_app=True, channel_sms=False)
        db = make_db([sub("u1", "170")], [pref])

        with patch("app.services.notify_service.dispatch", return_value=DispatchResult()) as mock_dispatch:
            await notify_truck_status_change(db, "170", "Out")

        assert mock_dispatch.call_args.kwargs["prefs"] == {"u1": pref}

    @pytest.mark.asyncio
    async def test_no_subscribers_skips_dispatch(self):
        db = make_db([sub("u1", "999")])

        with patch("app.services.notify_service.dispatch") as mock_dispatch:
            result = await notify_truck_status_change(db, "170", "Loading")

        mock_dispatch.assert_not_called()
        assert result.notified == 0

    @pytest.mark.asyncio
    async def test_end_marker_never_notifies(self):
        db = MagicMock()
        result = await notify_truck_status_change(db, "end", "Done")
        db.query.assert_not_called()
        assert result.notified == 0
