"""
Health check endpoint for the contact relay.

Liveness only: the service has no database, and the email provider is not
probed so health checks never send mail or spend provider quota.
"""
from datetime import datetime, timezone
from typing import Literal

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from app.api.deps import get_contact_handler
from app.core.config import settings
from app.services.contact_handler import ContactHandler

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    status: Literal["healthy"]
    version: str
    environment: str
    timestamp: datetime
    rate_limit_backend: str
    email_configured: bool

    class Config:
        json_schema_extra = {
            "example": {
                "status": "healthy",
                "version": "1.0.0",
                "environment": "production",
                "timestamp": "2026-02-08T14:30:00Z",
                "rate_limit_backend": "memory",
                "email_configured": True,
            }
        }


@router.get("/health", response_model=HealthResponse)
async def health(handler: ContactHandler = Depends(get_contact_handler)) -> HealthResponse:
    dispatcher = handler.dispatcher
    return HealthResponse(
        status="healthy",
        version=settings.VERSION,
        environment=settings.ENVIRONMENT,
        timestamp=datetime.now(timezone.utc),
        rate_limit_backend=handler.rate_limiter.store.stats()["backend"],
        email_configured=bool(
            dispatcher.sender
            and dispatcher.recipient
            and getattr(dispatcher.provider, "api_key", True)
        ),
    )
