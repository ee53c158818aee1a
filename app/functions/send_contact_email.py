"""
Function-platform entry point for the contact endpoint.

Accepts the event shape used by serverless HTTP functions:
    {"httpMethod": "POST", "headers": {...}, "body": "...", "isBase64Encoded": false}
(or ``requestContext.http.method`` for payload v2) and returns
    {"statusCode": 200, "headers": {...}, "body": "<json>"}.
"""
import asyncio
import base64
import binascii
from typing import Any, Dict, Optional, Union

from app.api.deps import get_contact_handler
from app.core.logging import setup_logging
from app.services.contact_handler import ContactHandler

setup_logging()


def _event_method(event: Dict[str, Any]) -> str:
    method = event.get("httpMethod")
    if not method:
        method = ((event.get("requestContext") or {}).get("http") or {}).get("method")
    return method or ""


def _event_body(event: Dict[str, Any]) -> Union[str, bytes, None]:
    body = event.get("body")
    if body and event.get("isBase64Encoded"):
        try:
            return base64.b64decode(body)
        except (binascii.Error, ValueError):
            # Undecodable payloads surface as invalid JSON.
            return body
    return body


async def handle_event(
    event: Dict[str, Any], handler: Optional[ContactHandler] = None
) -> Dict[str, Any]:
    handler = handler or get_contact_handler()
    response = await handler.handle(
        _event_method(event), event.get("headers") or {}, _event_body(event)
    )
    return {
        "statusCode": response.status_code,
        "headers": response.headers,
        "body": response.json_body(),
    }


def handler(event: Dict[str, Any], context: Any = None) -> Dict[str, Any]:
    return asyncio.run(handle_event(event or {}))
