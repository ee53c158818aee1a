"""Transactional email provider client (Resend HTTP API)."""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

import requests

logger = logging.getLogger(__name__)


class DispatchFailure(str, Enum):
    NOT_CONFIGURED = "not_configured"
    PROVIDER_REJECTED = "provider_rejected"
    TRANSPORT_ERROR = "transport_error"
    INVALID_RESPONSE = "invalid_response"


@dataclass(frozen=True)
class OutboundEmail:
    sender: str
    recipient: str
    subject: str
    html: str
    text: str
    reply_to: str


@dataclass(frozen=True)
class DispatchResult:
    """Outcome of one provider call. ``detail`` is for logs only."""

    ok: bool
    failure: Optional[DispatchFailure] = None
    detail: Optional[str] = None
    message_id: Optional[str] = None

    @classmethod
    def delivered(cls, message_id: Optional[str] = None) -> "DispatchResult":
        return cls(ok=True, message_id=message_id)

    @classmethod
    def failed(cls, failure: DispatchFailure, detail: str) -> "DispatchResult":
        return cls(ok=False, failure=failure, detail=detail)


class EmailProvider(ABC):
    """A provider exposing a single blocking "send message" operation."""

    name: str = "abstract"

    @abstractmethod
    def send(self, email: OutboundEmail) -> DispatchResult:
        """Send ``email`` and report the outcome without raising."""


class ResendEmailProvider(EmailProvider):
    name = "resend"

    def __init__(
        self,
        api_key: Optional[str],
        api_url: str = "https://api.resend.com/emails",
        timeout: float = 10.0,
    ) -> None:
        self.api_key = api_key
        self.api_url = api_url
        self.timeout = timeout

    def _payload(self, email: OutboundEmail) -> Dict[str, Any]:
        return {
            "from": email.sender,
            "to": [email.recipient],
            "subject": email.subject,
            "html": email.html,
            "text": email.text,
            "reply_to": email.reply_to,
        }

    @staticmethod
    def _error_detail(response: requests.Response) -> str:
        try:
            data = response.json()
        except ValueError:
            return f"HTTP {response.status_code}: {response.text[:200]}"
        if isinstance(data, dict):
            name = data.get("name") or "error"
            message = data.get("message") or ""
            return f"HTTP {response.status_code}: {name}: {message}"
        return f"HTTP {response.status_code}"

    def send(self, email: OutboundEmail) -> DispatchResult:
        if not self.api_key:
            return DispatchResult.failed(
                DispatchFailure.NOT_CONFIGURED, "RESEND_API_KEY is not configured"
            )

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        try:
            response = requests.post(
                self.api_url,
                json=self._payload(email),
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            return DispatchResult.failed(DispatchFailure.TRANSPORT_ERROR, str(exc))

        if response.status_code >= 400:
            return DispatchResult.failed(
                DispatchFailure.PROVIDER_REJECTED, self._error_detail(response)
            )

        try:
            data = response.json()
        except ValueError:
            return DispatchResult.failed(
                DispatchFailure.INVALID_RESPONSE, "provider response is not valid json"
            )

        if not isinstance(data, dict) or not data.get("id"):
            return DispatchResult.failed(
                DispatchFailure.INVALID_RESPONSE, f"unexpected provider response: {data!r}"[:200]
            )

        logger.debug("Resend accepted message id=%s", data["id"])
        return DispatchResult.delivered(message_id=str(data["id"]))
