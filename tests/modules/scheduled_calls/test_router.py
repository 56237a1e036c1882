"""
API tests for the scheduled calls admin router.
"""

from unittest.mock import AsyncMock, patch
from uuid import uuid4

from tutormatch.core.security import create_access_token
from tutormatch.modules.scheduled_calls.exceptions import ScheduledCallNotFoundError

SERVICE = "tutormatch.modules.scheduled_calls.service"
BASE = "/api/v1/admin/scheduled-calls"


class TestListScheduledCalls:
    def test_open_calls_with_count(self, client, make_call):
        calls = [make_call(), make_call(in_hours=4)]

        with patch(f"{SERVICE}.list_calls", AsyncMock(return_value=calls)) as mock_list:
            response = client.get(BASE)

        assert response.status_code == 200
        body = response.json()
        assert body["count"] == 2
        assert [c["id"] for c in body["data"]] == [str(c.id) for c in calls]
        assert mock_list.await_args.args[1] is False

    def test_completed_filter(self, client, make_call):
        with patch(
            f"{SERVICE}.list_calls", AsyncMock(return_value=[make_call(is_completed=True)])
        ) as mock_list:
            response = client.get(BASE, params={"completed": "true"})

        assert response.status_code == 200
        assert mock_list.await_args.args[1] is True


class TestScheduleCall:
    def test_created(self, client, make_call):
        payload = {"contact_name": "Efua Owusu", "call_at": "2026-10-20T10:00:00Z"}

        with patch(f"{SERVICE}.schedule_call", AsyncMock(return_value=make_call())):
            response = client.post(BASE, json=payload)

        assert response.status_code == 201
        assert response.json()["data"]["is_completed"] is False

    def test_blank_contact_name_rejected(self, client):
        payload = {"contact_name": "   ", "call_at": "2026-10-20T10:00:00Z"}

        with patch(f"{SERVICE}.schedule_call", AsyncMock()) as mock_schedule:
            response = client.post(BASE, json=payload)

        assert response.status_code == 422
        mock_schedule.assert_not_awaited()

    def test_call_time_required(self, client):
        response = client.post(BASE, json={"contact_name": "Efua Owusu"})
        assert response.status_code == 422


class TestUpdateAndDelete:
    def test_mark_completed(self, client, make_call):
        call = make_call(is_completed=True)

        with patch(f"{SERVICE}.set_completed", AsyncMock(return_value=call)) as mock_set:
            response = client.put(f"{BASE}/{call.id}", json={"is_completed": True})

        assert response.status_code == 200
        assert response.json()["data"]["is_completed"] is True
        assert mock_set.await_args.args[1:] == (call.id, True)

    def test_update_missing_call(self, client):
        with patch(
            f"{SERVICE}.set_completed", AsyncMock(side_effect=ScheduledCallNotFoundError())
        ):
            response = client.put(f"{BASE}/{uuid4()}", json={"is_completed": True})

        assert response.status_code == 404
        assert response.json()["detail"]["error"] == "SCHEDULED_CALL_NOT_FOUND"

    def test_delete(self, client):
        with patch(f"{SERVICE}.delete_call", AsyncMock(return_value=None)):
            response = client.delete(f"{BASE}/{uuid4()}")

        assert response.status_code == 200
        assert response.json()["success"] is True


class TestAccessControl:
    def test_teacher_cannot_list_calls(self, unauthenticated_client):
        token = create_access_token(str(uuid4()), {"role": "teacher"})

        response = unauthenticated_client.get(BASE, headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 403
