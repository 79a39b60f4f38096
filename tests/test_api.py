"""API Endpoint Tests.

The `client` fixture wires the app to the in-memory agent from conftest.
"""

from unittest.mock import AsyncMock, patch

import pytest

from apps.core_api.auth import create_access_token
from slate_llm.client import LLMCompletion, LLMError

from conftest import tool_call


@pytest.fixture
def propose(client, llm, auth_headers):
    """Post a message whose plan needs confirmation; return the response body."""

    def _propose():
        llm.script(
            LLMCompletion(
                tool_calls=[tool_call("create_scene", {"scene_number": "15", "int_ext": "EXT"})]
            )
        )
        response = client.post(
            "/agent/messages",
            json={"project_id": "proj-1", "message": "Add scene 15, exterior"},
            headers=auth_headers,
        )
        assert response.status_code == 200
        return response.json()

    return _propose


# ============================================================================
# SERVICE ENDPOINTS
# ============================================================================


def test_root_endpoint(client):
    """Test root endpoint returns API info."""
    response = client.get("/")
    assert response.status_code == 200
    assert "Slate Agent API" in response.json()["name"]


def test_healthz_returns_200(client):
    """Test liveness probe."""
    response = client.get("/healthz")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_readyz_returns_ready(client):
    """Test readiness probe."""
    with patch(
        "apps.core_api.routers.health.check_db_connection", new_callable=AsyncMock
    ) as mock_check:
        mock_check.return_value = True
        response = client.get("/readyz")

    assert response.status_code == 200
    assert response.json()["checks"]["database"] == "ok"


def test_readyz_reports_database_down(client):
    with patch(
        "apps.core_api.routers.health.check_db_connection", new_callable=AsyncMock
    ) as mock_check:
        mock_check.side_effect = OSError("connection refused")
        response = client.get("/readyz")

    assert response.status_code == 503


def test_metrics_exposed(client):
    """Test Prometheus metrics endpoint."""
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "text/plain" in response.headers["content-type"]


def test_request_id_is_echoed(client):
    response = client.get("/healthz", headers={"X-Request-ID": "req-123"})
    assert response.headers["X-Request-ID"] == "req-123"


def test_malformed_request_id_is_replaced(client):
    response = client.get("/healthz", headers={"X-Request-ID": "../../etc/passwd"})
    assert response.headers["X-Request-ID"] != "../../etc/passwd"
    assert len(response.headers["X-Request-ID"]) == 36


# ============================================================================
# MESSAGES
# ============================================================================


def test_message_requires_auth(client):
    response = client.post("/agent/messages", json={"project_id": "proj-1", "message": "hi"})
    assert response.status_code == 401


def test_message_validates_body(client, auth_headers):
    response = client.post("/agent/messages", json={}, headers=auth_headers)
    assert response.status_code == 422


def test_blank_message_rejected(client, auth_headers):
    response = client.post(
        "/agent/messages", json={"project_id": "proj-1", "message": "   "}, headers=auth_headers
    )
    assert response.status_code == 400


def test_overlong_message_rejected(client, auth_headers):
    response = client.post(
        "/agent/messages",
        json={"project_id": "proj-1", "message": "x" * 5000},
        headers=auth_headers,
    )
    assert response.status_code == 400
    assert "too long" in response.json()["detail"]


def test_read_only_question(client, llm, auth_headers, fake_api):
    llm.script(
        LLMCompletion(tool_calls=[tool_call("get_scenes")]),
        LLMCompletion(content="One scene: 1 (KITCHEN)."),
    )

    response = client.post(
        "/agent/messages",
        json={"project_id": "proj-1", "message": "What scenes do we have?"},
        headers=auth_headers,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "completed"
    assert body["message"]["content"] == "One scene: 1 (KITCHEN)."
    assert body["message"]["metadata"] == {"type": "tool_calls_auto", "tools": ["get_scenes"]}
    assert fake_api.mutations == []


def test_non_member_gets_403(client, auth_headers):
    response = client.post(
        "/agent/messages",
        json={"project_id": "someone-elses-project", "message": "hi"},
        headers=auth_headers,
    )
    assert response.status_code == 403
    assert response.json()["error"] == "project_access_denied"


def test_provider_outage_is_retryable_503(client, llm, auth_headers):
    llm.script(LLMError("provider down"))

    response = client.post(
        "/agent/messages", json={"project_id": "proj-1", "message": "hi"}, headers=auth_headers
    )

    assert response.status_code == 503
    assert response.json()["retryable"] is True


def test_production_outage_is_retryable_503(client, auth_headers, fake_api):
    fake_api.outage = True

    response = client.post(
        "/agent/messages", json={"project_id": "proj-1", "message": "hi"}, headers=auth_headers
    )

    assert response.status_code == 503
    assert response.json()["error"] == "service_unavailable"


def test_history_endpoint(client, llm, auth_headers):
    llm.script(LLMCompletion(content="Hello!"))
    client.post(
        "/agent/messages", json={"project_id": "proj-1", "message": "hi"}, headers=auth_headers
    )

    response = client.get("/agent/messages", params={"project_id": "proj-1"}, headers=auth_headers)

    assert response.status_code == 200
    assert [m["role"] for m in response.json()["messages"]] == ["user", "assistant"]


# ============================================================================
# CONFIRMATIONS
# ============================================================================


def test_confirmation_round_trip(client, auth_headers, propose, fake_api):
    pending = propose()
    assert pending["status"] == "pending_confirmation"
    assert pending["message"]["metadata"]["type"] == "tool_confirmation_request"
    assert fake_api.mutations == []

    response = client.post(
        "/agent/confirmations",
        json={
            "project_id": "proj-1",
            "confirmation_id": pending["confirmation_id"],
            "approved": True,
        },
        headers=auth_headers,
    )

    assert response.status_code == 200
    metadata = response.json()["message"]["metadata"]
    assert metadata["type"] == "tool_execution_result"
    assert metadata["outcome"] == "completed"
    assert len(fake_api.mutations) == 1


def test_duplicate_confirmation_is_409(client, auth_headers, propose, fake_api):
    pending = propose()
    body = {"project_id": "proj-1", "confirmation_id": pending["confirmation_id"], "approved": True}

    first = client.post("/agent/confirmations", json=body, headers=auth_headers)
    second = client.post("/agent/confirmations", json=body, headers=auth_headers)

    assert first.status_code == 200
    assert second.status_code == 409
    assert second.json()["error"] == "confirmation_already_resolved"
    assert len(fake_api.mutations) == 1


def test_unknown_confirmation_is_404(client, auth_headers):
    response = client.post(
        "/agent/confirmations",
        json={"project_id": "proj-1", "confirmation_id": "nope", "approved": True},
        headers=auth_headers,
    )
    assert response.status_code == 404
    assert response.json()["error"] == "confirmation_not_found"


def test_expired_confirmation_is_410(client, auth_headers, propose, confirmation_store, fake_api):
    pending = propose()
    confirmation_store.backdate(pending["confirmation_id"])

    response = client.post(
        "/agent/confirmations",
        json={"project_id": "proj-1", "confirmation_id": pending["confirmation_id"], "approved": True},
        headers=auth_headers,
    )

    assert response.status_code == 410
    assert fake_api.mutations == []


def test_confirmation_status(client, auth_headers, propose, fake_api):
    pending = propose()

    mine = client.get(f"/agent/confirmations/{pending['confirmation_id']}", headers=auth_headers)
    fake_api.add_member("proj-1", "user-2")
    theirs = client.get(
        f"/agent/confirmations/{pending['confirmation_id']}",
        headers={"Authorization": f"Bearer {create_access_token('user-2')}"},
    )

    assert mine.status_code == 200
    assert mine.json()["status"] == "pending"
    assert mine.json()["actions"][0]["tool_name"] == "create_scene"
    assert theirs.status_code == 404
