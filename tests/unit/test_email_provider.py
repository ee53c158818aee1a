"""Tests for the Resend provider client."""
from unittest.mock import MagicMock, patch

import pytest
import requests

from app.services.email_provider import (
    DispatchFailure,
    OutboundEmail,
    ResendEmailProvider,
)

EMAIL = OutboundEmail(
    sender="Website <noreply@example.com>",
    recipient="owner@example.com",
    subject="New contact from Jane Doe",
    html="<p>Hello</p>",
    text="Hello",
    reply_to="jane@example.com",
)


def _response(status_code=200, json_data=None, text=""):
    response = MagicMock(spec=requests.Response)
    response.status_code = status_code
    response.text = text
    if isinstance(json_data, Exception):
        response.json.side_effect = json_data
    else:
        response.json.return_value = json_data
    return response


@pytest.fixture()
def provider():
    return ResendEmailProvider(api_key="re_test_key_123456", api_url="https://resend.test/emails")


def test_successful_send_posts_expected_payload(provider):
    with patch("app.services.email_provider.requests.post") as mock_post:
        mock_post.return_value = _response(200, {"id": "49a3999c-0ce1"})
        result = provider.send(EMAIL)

    assert result.ok is True
    assert result.message_id == "49a3999c-0ce1"

    args, kwargs = mock_post.call_args
    assert args[0] == "https://resend.test/emails"
    assert kwargs["headers"]["Authorization"] == "Bearer re_test_key_123456"
    assert kwargs["timeout"] == 10.0
    assert kwargs["json"] == {
        "from": "Website <noreply@example.com>",
        "to": ["owner@example.com"],
        "subject": "New contact from Jane Doe",
        "html": "<p>Hello</p>",
        "text": "Hello",
        "reply_to": "jane@example.com",
    }


def test_missing_api_key_is_not_configured():
    provider = ResendEmailProvider(api_key=None)
    with patch("app.services.email_provider.requests.post") as mock_post:
        result = provider.send(EMAIL)

    assert result.ok is False
    assert result.failure is DispatchFailure.NOT_CONFIGURED
    mock_post.assert_not_called()


def test_provider_error_object_is_rejection(provider):
    error = {"statusCode": 422, "name": "validation_error", "message": "Invalid `from` field."}
    with patch("app.services.email_provider.requests.post") as mock_post:
        mock_post.return_value = _response(422, error)
        result = provider.send(EMAIL)

    assert result.ok is False
    assert result.failure is DispatchFailure.PROVIDER_REJECTED
    assert result.detail == "HTTP 422: validation_error: Invalid `from` field."


def test_provider_error_without_json_body(provider):
    with patch("app.services.email_provider.requests.post") as mock_post:
        mock_post.return_value = _response(502, ValueError("no json"), text="Bad Gateway")
        result = provider.send(EMAIL)

    assert result.failure is DispatchFailure.PROVIDER_REJECTED
    assert result.detail == "HTTP 502: Bad Gateway"


def test_transport_error(provider):
    with patch("app.services.email_provider.requests.post") as mock_post:
        mock_post.side_effect = requests.ConnectionError("connection refused")
        result = provider.send(EMAIL)

    assert result.ok is False
    assert result.failure is DispatchFailure.TRANSPORT_ERROR
    assert "connection refused" in result.detail


@pytest.mark.parametrize("body", [ValueError("bad json"), {"object": "email"}, ["id"]])
def test_unexpected_success_body_is_invalid_response(provider, body):
    with patch("app.services.email_provider.requests.post") as mock_post:
        mock_post.return_value = _response(200, body)
        result = provider.send(EMAIL)

    assert result.ok is False
    assert result.failure is DispatchFailure.INVALID_RESPONSE
