"""
Contact form endpoint.

Accepts every method so the handler's own method gating answers OPTIONS
preflights and rejects non-POST requests with the JSON error body.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from app.api.deps import get_contact_handler
from app.core.config import settings
from app.services.contact_handler import ContactHandler

router = APIRouter()

CONTACT_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


@router.api_route(
    settings.CONTACT_PATH,
    methods=CONTACT_METHODS,
    summary="Send a contact form message",
    description="Validates a contact submission and relays it by email. POST a JSON body.",
)
async def contact_endpoint(
    request: Request,
    handler: ContactHandler = Depends(get_contact_handler),
) -> JSONResponse:
    body = await request.body()
    result = await handler.handle(request.method, request.headers, body)
    return JSONResponse(
        status_code=result.status_code,
        content=result.body,
        headers=result.headers,
    )
