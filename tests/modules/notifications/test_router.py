"""
Tests for the notifications WebSocket endpoint.
"""

import json
from unittest.mock import patch
from uuid import uuid4

import pytest
from fastapi import status
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from tutormatch.core import notifications
from tutormatch.core.notifications import EVENT_NEW_APPLICATION, NotificationBroker
from tutormatch.core.security import create_access_token
from tutormatch.main import app
from tutormatch.modules.notifications.router import _authenticate


def _token(role: str) -> str:
    return create_access_token(str(uuid4()), {"role": role})


class _PrefilledBroker(NotificationBroker):
    """Broker whose subscribers start with one queued event."""

    def subscribe(self):
        queue = super().subscribe()
        queue.put_nowait(
            json.dumps({"type": EVENT_NEW_APPLICATION, "data": {"vacancyId": "v-1"}})
        )
        return queue


class TestAuthenticate:
    def test_admin_token_accepted(self):
        user = _authenticate(_token("admin"))
        assert user is not None
        assert user.is_admin

    def test_teacher_token_refused(self):
        assert _authenticate(_token("teacher")) is None

    def test_missing_or_invalid_token_refused(self):
        assert _authenticate(None) is None
        assert _authenticate("garbage") is None


class TestNotificationsStream:
    def test_connection_without_token_is_closed(self):
        client = TestClient(app)

        with pytest.raises(WebSocketDisconnect) as exc_info:
            with client.websocket_connect("/ws/notifications") as websocket:
                websocket.receive_text()

        assert exc_info.value.code == status.WS_1008_POLICY_VIOLATION

    def test_teacher_connection_is_closed(self):
        client = TestClient(app)

        with pytest.raises(WebSocketDisconnect) as exc_info:
            with client.websocket_connect(
                f"/ws/notifications?token={_token('teacher')}"
            ) as websocket:
                websocket.receive_text()

        assert exc_info.value.code == status.WS_1008_POLICY_VIOLATION

    def test_connection_refused_when_broker_not_running(self):
        client = TestClient(app)

        with patch.object(notifications, "_broker", None):
            with pytest.raises(WebSocketDisconnect) as exc_info:
                with client.websocket_connect(
                    f"/ws/notifications?token={_token('admin')}"
                ) as websocket:
                    websocket.receive_text()

        assert exc_info.value.code == status.WS_1011_INTERNAL_ERROR

    def test_admin_receives_events(self):
        client = TestClient(app)
        broker = _PrefilledBroker(None)

        with patch.object(notifications, "_broker", broker):
            with client.websocket_connect(
                f"/ws/notifications?token={_token('admin')}"
            ) as websocket:
                message = websocket.receive_json()

        assert message == {"type": EVENT_NEW_APPLICATION, "data": {"vacancyId": "v-1"}}
