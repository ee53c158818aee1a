"""End-to-end tests for the contact endpoint over HTTP."""
from fastapi.testclient import TestClient

from app.api.deps import get_contact_handler
from app.main import app

CONTACT_URL = "/api/v1/contact"
VALID = {
    "name": "Jane Doe",
    "email": "jane@example.com",
    "message": "Hello, I would like to get in touch.",
}


def test_valid_submission_is_sent(client, provider):
    response = client.post(CONTACT_URL, json=VALID)

    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Message sent successfully!"}
    assert len(provider.sent) == 1
    sent = provider.sent[0]
    assert sent.reply_to == "jane@example.com"
    assert sent.recipient == "owner@example.com"
    assert sent.subject == "New contact from Jane Doe"


def test_invalid_submission_reports_every_problem(client, provider):
    response = client.post(
        CONTACT_URL, json={"name": "J", "email": "not-an-email", "message": "short"}
    )

    assert response.status_code == 400
    payload = response.json()
    assert payload["success"] is False
    assert payload["message"] == "Validation failed"
    assert payload["error"] == (
        "Name is required and must be at least 2 characters, "
        "Valid email address is required, "
        "Message is required and must be at least 10 characters"
    )
    assert provider.sent == []


def test_preflight(client, provider):
    response = client.options(
        CONTACT_URL,
        headers={
            "Origin": "http://localhost:5173",
            "Access-Control-Request-Method": "POST",
        },
    )

    assert response.status_code == 200
    assert response.json() == {"message": "CORS preflight successful"}
    assert response.headers["access-control-allow-origin"] == "*"
    assert response.headers["access-control-allow-methods"] == "POST, OPTIONS"
    assert response.headers["access-control-allow-headers"] == "Content-Type, Authorization"
    assert provider.sent == []


def test_get_is_not_allowed(client):
    response = client.get(CONTACT_URL)

    assert response.status_code == 405
    assert response.json() == {"success": False, "message": "Method not allowed. Use POST."}
    assert response.headers["content-type"] == "application/json"


def test_unregistered_methods_get_the_same_405(client, provider):
    for method in ("TRACE", "PROPFIND"):
        response = client.request(
            method, CONTACT_URL, headers={"Origin": "https://site.example"}
        )

        assert response.status_code == 405
        assert response.json() == {"success": False, "message": "Method not allowed. Use POST."}
        assert response.headers["access-control-allow-origin"] == "*"
        assert response.headers["access-control-allow-methods"] == "POST, OPTIONS"
    assert provider.sent == []


def test_head_is_not_allowed(client):
    response = client.head(CONTACT_URL, headers={"Origin": "https://site.example"})

    assert response.status_code == 405
    assert response.headers["access-control-allow-origin"] == "*"
    assert response.headers["content-type"] == "application/json"


def test_other_paths_keep_default_405(client):
    response = client.post("/health")

    assert response.status_code == 405
    assert response.json() == {"detail": "Method Not Allowed"}


def test_invalid_json_body(client):
    response = client.post(
        CONTACT_URL,
        content="{not json",
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json() == {"success": False, "message": "Invalid JSON in request body"}


def test_sixth_request_in_window_is_rate_limited(client, provider):
    headers = {"X-Forwarded-For": "203.0.113.10"}

    for _ in range(5):
        assert client.post(CONTACT_URL, json=VALID, headers=headers).status_code == 200
    assert len(provider.sent) == 5

    blocked = client.post(CONTACT_URL, json=VALID, headers=headers)

    assert blocked.status_code == 429
    assert blocked.json() == {
        "success": False,
        "message": "Too many requests. Please try again later.",
    }
    assert len(provider.sent) == 5


def test_window_reopens_after_expiry(client, provider, clock):
    headers = {"client-ip": "203.0.113.10"}
    for _ in range(6):
        client.post(CONTACT_URL, json=VALID, headers=headers)

    clock.advance(61)

    assert client.post(CONTACT_URL, json=VALID, headers=headers).status_code == 200
    assert len(provider.sent) == 6


def test_anonymous_callers_share_one_bucket(client):
    for _ in range(5):
        client.post(CONTACT_URL, json=VALID)

    assert client.post(CONTACT_URL, json=VALID).status_code == 429
    assert (
        client.post(CONTACT_URL, json=VALID, headers={"client-ip": "198.51.100.7"}).status_code
        == 200
    )


def test_optional_fields_reach_the_email(client, provider):
    response = client.post(
        CONTACT_URL,
        json={**VALID, "subject": "Partnership", "phone": "+1 555 0100", "company": "ACME"},
    )

    assert response.status_code == 200
    sent = provider.sent[0]
    assert sent.subject == "Contact form: Partnership"
    assert "Company: ACME" in sent.text
    assert "+1 555 0100" in sent.html


def test_response_carries_request_id(client):
    response = client.post(CONTACT_URL, json=VALID, headers={"X-Request-ID": "req-123"})
    assert response.headers["x-request-id"] == "req-123"


class _CrashingHandler:
    async def handle(self, method, headers, body):
        raise RuntimeError("boom")


def test_unhandled_error_returns_generic_body_with_cors():
    app.dependency_overrides[get_contact_handler] = lambda: _CrashingHandler()
    try:
        with TestClient(app, raise_server_exceptions=False) as c:
            response = c.post(CONTACT_URL, json=VALID, headers={"Origin": "https://site.example"})
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 500
    assert response.json() == {
        "success": False,
        "message": "An unexpected error occurred. Please try again.",
    }
    assert "boom" not in response.text
    assert response.headers["access-control-allow-origin"] == "*"


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "healthy"
    assert payload["rate_limit_backend"] == "memory"
    assert payload["email_configured"] is True


def test_health_reports_backend_from_store_stats(client, rate_limiter, monkeypatch):
    monkeypatch.setattr(
        rate_limiter.store, "stats", lambda: {"backend": "redis", "tracked_keys": 3}
    )

    response = client.get("/health")

    assert response.json()["rate_limit_backend"] == "redis"
