"""Request-scoped logging context installed by the API middleware."""

import pytest
import structlog
from fastapi import FastAPI
from fastapi.testclient import TestClient

from studio.api.middleware import REQUEST_ID_HEADER, install_request_context
from studio.domain import studio


@pytest.fixture()
def client():
    app = FastAPI()
    install_request_context(app, studio)

    @app.get("/log-context")
    async def log_context():
        return structlog.contextvars.get_contextvars()

    return TestClient(app)


def test_request_fields_are_bound_for_the_handler(client):
    response = client.get("/log-context", headers={REQUEST_ID_HEADER: "req-123", "X-User-Id": "partner-001"})

    assert response.status_code == 200
    bound = response.json()
    assert bound["request_id"] == "req-123"
    assert bound["method"] == "GET"
    assert bound["path"] == "/log-context"
    assert bound["user_id"] == "partner-001"
    assert response.headers[REQUEST_ID_HEADER] == "req-123"


def test_request_id_is_generated_when_missing(client):
    response = client.get("/log-context")

    generated = response.headers[REQUEST_ID_HEADER]
    assert generated
    assert response.json()["request_id"] == generated


def test_fields_do_not_carry_over_between_requests(client):
    client.get("/log-context", headers={"X-User-Id": "partner-001"})

    bound = client.get("/log-context").json()

    assert bound["user_id"] is None


def test_context_is_cleared_after_the_request(client):
    client.get("/log-context", headers={REQUEST_ID_HEADER: "req-456"})

    assert "request_id" not in structlog.contextvars.get_contextvars()
