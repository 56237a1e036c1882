"""
API tests for the parent request routers.
"""

from unittest.mock import AsyncMock, patch
from uuid import uuid4

from tutormatch.modules.parent_requests.models import ParentRequestStatus
from tutormatch.modules.parent_requests.router import RATE_LIMIT_SUBMIT
from tutormatch.modules.shared import PersistenceFailureError

SERVICE = "tutormatch.modules.parent_requests.service"

SUBMISSION = {
    "parent_name": "Efua Owusu",
    "phone": "+233244000111",
    "address": "12 Ring Road, Accra",
    "preferred_teacher": "female",
    "grade": "Primary 6",
    "subjects": ["Mathematics", "Science"],
    "preferred_time": "Weekends",
}


class TestSubmitEndpoint:
    """POST /api/v1/parent-requests"""

    def test_submit_returns_application_number(self, client, make_parent_request):
        parent_request = make_parent_request(application_number=17)

        with patch(f"{SERVICE}.submit_parent_request", AsyncMock(return_value=parent_request)):
            response = client.post("/api/v1/parent-requests", json=SUBMISSION)

        assert response.status_code == 201
        body = response.json()
        assert body["application_number"] == 17
        assert body["data"]["status"] == "new"

    def test_too_many_subjects(self, client):
        payload = {**SUBMISSION, "subjects": ["A", "B", "C", "D"]}
        response = client.post("/api/v1/parent-requests", json=payload)
        assert response.status_code == 422

    def test_persistence_failure(self, client):
        error = PersistenceFailureError("submit your request")
        with patch(f"{SERVICE}.submit_parent_request", AsyncMock(side_effect=error)):
            response = client.post("/api/v1/parent-requests", json=SUBMISSION)

        assert response.status_code == 503
        assert response.json()["detail"]["error"] == "PERSISTENCE_FAILURE"

    def test_submissions_are_rate_limited(self, client, make_parent_request):
        limit, _ = RATE_LIMIT_SUBMIT
        parent_request = make_parent_request()

        with patch(f"{SERVICE}.submit_parent_request", AsyncMock(return_value=parent_request)):
            for _ in range(limit):
                assert client.post("/api/v1/parent-requests", json=SUBMISSION).status_code == 201
            response = client.post("/api/v1/parent-requests", json=SUBMISSION)

        assert response.status_code == 429


class TestAdminEndpoints:
    def test_setting_done_is_refused(self, client):
        """Runs the real service: the guard fires before any database call."""
        response = client.put(
            f"/api/v1/admin/parent-requests/{uuid4()}/status", json={"status": "done"}
        )

        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "INVALID_STATUS_CHANGE"

    def test_set_status(self, client, make_parent_request):
        parent_request = make_parent_request(status=ParentRequestStatus.NOT_DONE)

        with patch(
            f"{SERVICE}.update_parent_status", AsyncMock(return_value=parent_request)
        ) as mock_update:
            response = client.put(
                f"/api/v1/admin/parent-requests/{parent_request.id}/status",
                json={"status": "not_done"},
            )

        assert response.status_code == 200
        assert response.json()["data"]["status"] == "not_done"
        assert mock_update.await_args.args[2] == ParentRequestStatus.NOT_DONE

    def test_record_rejection(self, client, make_parent_request):
        parent_request = make_parent_request(
            status=ParentRequestStatus.NOT_DONE, rejection_count=5
        )

        with patch(f"{SERVICE}.record_rejection", AsyncMock(return_value=parent_request)):
            response = client.put(f"/api/v1/admin/parent-requests/{parent_request.id}/reject")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["rejection_count"] == 5
        assert data["status"] == "not_done"

    def test_list(self, client, make_parent_request):
        rows = [make_parent_request(application_number=2), make_parent_request()]

        with patch(f"{SERVICE}.list_parent_requests", AsyncMock(return_value=rows)):
            response = client.get("/api/v1/admin/parent-requests")

        assert response.status_code == 200
        assert [r["application_number"] for r in response.json()["data"]] == [2, 1]

    def test_get_unknown(self, client):
        response_mock = AsyncMock(return_value=None)
        with patch(f"{SERVICE}.repository.get_by_id", response_mock):
            response = client.get(f"/api/v1/admin/parent-requests/{uuid4()}")

        assert response.status_code == 404
        assert response.json()["detail"]["error"] == "PARENT_REQUEST_NOT_FOUND"
