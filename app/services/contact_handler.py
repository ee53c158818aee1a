"""
Contact form request pipeline.

Classify method -> rate limit -> parse JSON -> validate -> render -> dispatch.
Every path ends in a JSON ApiResponse carrying the CORS headers; nothing
raises past ``ContactHandler.handle``.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Sequence, Union

from app.core.cors import build_cors_headers
from app.core.rate_limiter import DEFAULT_CLIENT_KEY_HEADERS, RateLimiter, get_client_key
from app.schemas.contact import ApiResponse
from app.services.contact_dispatcher import ContactDispatcher
from app.services.contact_renderer import ContactRenderer
from app.services.contact_validator import (
    DEFAULT_MAX_MESSAGE_LENGTH,
    to_submission,
    validate_contact_data,
)

logger = logging.getLogger(__name__)

PREFLIGHT_MESSAGE = "CORS preflight successful"
SUCCESS_MESSAGE = "Message sent successfully!"
METHOD_NOT_ALLOWED_MESSAGE = "Method not allowed. Use POST."
RATE_LIMITED_MESSAGE = "Too many requests. Please try again later."
INVALID_JSON_MESSAGE = "Invalid JSON in request body"
VALIDATION_FAILED_MESSAGE = "Validation failed"
DELIVERY_FAILED_MESSAGE = "Failed to send email. Please try again."
UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred. Please try again."


class InvalidJSONBody(ValueError):
    pass


@dataclass
class HandlerResponse:
    status_code: int
    body: Dict[str, Any]
    headers: Dict[str, str] = field(default_factory=dict)

    def json_body(self) -> str:
        return json.dumps(self.body)


def _normalize_headers(headers: Optional[Mapping[str, Any]]) -> Dict[str, str]:
    if not headers:
        return {}
    return {str(key).lower(): str(value) for key, value in headers.items() if value is not None}


def parse_json_body(body: Union[str, bytes, None]) -> Any:
    """Parse a request body; an empty body is an empty object."""
    if isinstance(body, bytes):
        try:
            body = body.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise InvalidJSONBody(str(exc)) from exc
    if not body:
        return {}
    try:
        return json.loads(body)
    except ValueError as exc:
        raise InvalidJSONBody(str(exc)) from exc


class ContactHandler:
    """Single-endpoint orchestrator shared by the HTTP app and the function adapter."""

    def __init__(
        self,
        rate_limiter: RateLimiter,
        dispatcher: ContactDispatcher,
        renderer: Optional[ContactRenderer] = None,
        allowed_origins: Sequence[str] = (),
        max_message_length: int = DEFAULT_MAX_MESSAGE_LENGTH,
        client_key_headers: Sequence[str] = DEFAULT_CLIENT_KEY_HEADERS,
    ) -> None:
        self.rate_limiter = rate_limiter
        self.dispatcher = dispatcher
        self.renderer = renderer or ContactRenderer()
        self.allowed_origins = list(allowed_origins)
        self.max_message_length = max_message_length
        self.client_key_headers = [name.lower() for name in client_key_headers]

    def _respond(
        self, status_code: int, cors_headers: Dict[str, str], response: ApiResponse
    ) -> HandlerResponse:
        return HandlerResponse(
            status_code=status_code, body=response.to_body(), headers=dict(cors_headers)
        )

    async def handle(
        self,
        method: str,
        headers: Optional[Mapping[str, Any]] = None,
        body: Union[str, bytes, None] = None,
    ) -> HandlerResponse:
        request_headers = _normalize_headers(headers)
        cors_headers = build_cors_headers(request_headers.get("origin"), self.allowed_origins)

        try:
            return await self._process(
                (method or "").upper(), request_headers, body, cors_headers
            )
        except Exception:
            logger.exception(
                "Unexpected error while handling contact request",
                extra={"event": "contact_unexpected_error"},
            )
            return self._respond(
                500,
                cors_headers,
                ApiResponse(success=False, message=UNEXPECTED_ERROR_MESSAGE),
            )

    async def _process(
        self,
        method: str,
        headers: Dict[str, str],
        body: Union[str, bytes, None],
        cors_headers: Dict[str, str],
    ) -> HandlerResponse:
        if method == "OPTIONS":
            return HandlerResponse(
                status_code=200,
                body={"message": PREFLIGHT_MESSAGE},
                headers=dict(cors_headers),
            )

        if method != "POST":
            return self._respond(
                405,
                cors_headers,
                ApiResponse(success=False, message=METHOD_NOT_ALLOWED_MESSAGE),
            )

        client_key = get_client_key(headers, self.client_key_headers)
        if not self.rate_limiter.allow(client_key):
            logger.info("Contact request rate limited client=%s", client_key)
            return self._respond(
                429,
                cors_headers,
                ApiResponse(success=False, message=RATE_LIMITED_MESSAGE),
            )

        try:
            payload = parse_json_body(body)
        except InvalidJSONBody:
            return self._respond(
                400,
                cors_headers,
                ApiResponse(success=False, message=INVALID_JSON_MESSAGE),
            )

        validation = validate_contact_data(payload, self.max_message_length)
        if not validation.is_valid:
            logger.info(
                "Contact request failed validation errors=%d", len(validation.errors)
            )
            return self._respond(
                400,
                cors_headers,
                ApiResponse(
                    success=False,
                    message=VALIDATION_FAILED_MESSAGE,
                    error=", ".join(validation.errors),
                ),
            )

        submission = to_submission(payload)
        rendered = self.renderer.render(submission)

        result = await self.dispatcher.send(rendered, submission)
        if not result.ok:
            return self._respond(
                500,
                cors_headers,
                ApiResponse(success=False, message=DELIVERY_FAILED_MESSAGE),
            )

        logger.info(
            "AUDIT: Contact message sent message_id=%s email_domain=%s",
            result.message_id,
            submission.email_domain,
            extra={
                "event": "contact_message_sent",
                "email_domain": submission.email_domain,
                "has_subject": submission.subject is not None,
            },
        )
        return self._respond(
            200, cors_headers, ApiResponse(success=True, message=SUCCESS_MESSAGE)
        )
