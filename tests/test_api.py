# tests/test_api.py
import pytest
from fastapi import status

from voice_interview.application.feedback import FeedbackResult


def receive_until(websocket, message_type, limit=10):
    seen = []
    for _ in range(limit):
        message = websocket.receive_json()
        seen.append(message)
        if message["type"] == message_type:
            return message, seen
    raise AssertionError(f"no {message_type!r} message in {seen}")


def test_health_check(client):
    """Test health check endpoint."""
    response = client.get("/api/health")
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["status"] == "ok"
    assert response.json()["missing"] == []


def test_health_reports_missing_settings(client, settings, app):
    from voice_interview.core.config import get_settings
    app.dependency_overrides[get_settings] = lambda: settings.model_copy(update={"GENERATE_WORKFLOW_ID": ""})

    body = client.get("/api/health").json()

    assert body["status"] == "degraded"
    assert body["missing"] == ["GENERATE_WORKFLOW_ID"]


def test_websocket_connection(client):
    """Test WebSocket connection."""
    with client.websocket_connect("/ws") as websocket:
        data = websocket.receive_json()
        assert "type" in data
        assert data["type"] == "connection_established"


def test_generate_call_navigates_home(client, feedback_service):
    with client.websocket_connect("/ws") as websocket:
        websocket.receive_json()
        websocket.send_json({"type": "start", "data": {"userId": "u1", "userName": "Ana", "type": "generate"}})

        command, _ = receive_until(websocket, "command")
        assert command == {
            "type": "command",
            "command": "start",
            "targetId": "workflow-test",
            "parameters": {"variableValues": {"username": "Ana", "userid": "u1"}},
        }
        state, _ = receive_until(websocket, "state")
        assert state["status"] == "CONNECTING"

        websocket.send_json({"type": "provider_event", "data": {"type": "call-start"}})
        state, _ = receive_until(websocket, "state")
        assert state["status"] == "ACTIVE"

        websocket.send_json({"type": "provider_event", "data": {"type": "call-end"}})
        navigate, _ = receive_until(websocket, "navigate")

    assert navigate["destination"] == "/"
    assert feedback_service.requests == []


def test_evaluate_call_navigates_to_feedback(client, feedback_service):
    with client.websocket_connect("/ws") as websocket:
        websocket.receive_json()
        websocket.send_json({
            "type": "start",
            "data": {
                "userId": "u1",
                "interviewId": "iv1",
                "type": "evaluate",
                "questions": ["Tell me about yourself", "Why this role?"],
            },
        })
        command, _ = receive_until(websocket, "command")
        assert command["parameters"]["variableValues"]["questions"] == "- Tell me about yourself\n- Why this role?"
        receive_until(websocket, "state")

        websocket.send_json({"type": "provider_event", "data": {"type": "call-start"}})
        receive_until(websocket, "state")
        websocket.send_json({"type": "provider_event", "data": {
            "type": "transcript", "role": "user", "transcriptType": "partial", "transcript": "I th",
        }})
        state, _ = receive_until(websocket, "state")
        assert state["pendingUtterance"] == "I th"
        websocket.send_json({"type": "provider_event", "data": {
            "type": "transcript", "role": "user", "transcriptType": "final", "transcript": "I think so",
        }})
        state, _ = receive_until(websocket, "state")
        assert state["history"] == [{"role": "user", "content": "I think so"}]
        assert state["pendingUtterance"] == ""

        websocket.send_json({"type": "stop"})
        navigate, _ = receive_until(websocket, "navigate")

    assert navigate["destination"] == "/interview/iv1/feedback"
    assert navigate["interviewId"] == "iv1"
    assert len(feedback_service.requests) == 1
    assert feedback_service.requests[0].to_wire()["transcript"] == [{"role": "user", "content": "I think so"}]


def test_failed_feedback_reports_error_and_goes_home(client, feedback_service):
    feedback_service.result = FeedbackResult(success=False)
    with client.websocket_connect("/ws") as websocket:
        websocket.receive_json()
        websocket.send_json({"type": "start", "data": {"userId": "u1", "interviewId": "iv1", "type": "evaluate"}})
        receive_until(websocket, "state")
        websocket.send_json({"type": "provider_event", "data": {"type": "call-start"}})
        receive_until(websocket, "state")
        websocket.send_json({"type": "stop"})
        navigate, seen = receive_until(websocket, "navigate")

    errors = [m for m in seen if m["type"] == "error"]
    assert [e["kind"] for e in errors] == ["FeedbackDispatchFailure"]
    assert navigate["destination"] == "/"


def test_invalid_messages_are_reported(client):
    with client.websocket_connect("/ws") as websocket:
        websocket.receive_json()

        websocket.send_json({"type": "dance"})
        error, _ = receive_until(websocket, "error")
        assert error["kind"] == "InvalidMessage"
        receive_until(websocket, "state")

        websocket.send_json({"type": "start", "data": {"type": "evaluate"}})
        error, _ = receive_until(websocket, "error")
        assert error["message"] == "invalid session context"
        state, _ = receive_until(websocket, "state")
        assert state["status"] == "INACTIVE"

        websocket.send_json({"type": "provider_event", "data": {"type": "transcript"}})
        error, _ = receive_until(websocket, "error")
        assert error["message"] == "invalid provider event"


def test_start_twice_is_rejected(client):
    with client.websocket_connect("/ws") as websocket:
        websocket.receive_json()
        start = {"type": "start", "data": {"userId": "u1", "type": "generate"}}
        websocket.send_json(start)
        receive_until(websocket, "state")

        websocket.send_json(start)
        error, _ = receive_until(websocket, "error")

    assert error["kind"] == "InvalidTransitionError"
