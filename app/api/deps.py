from functools import lru_cache

from app.core.config import settings
from app.core.rate_limiter import RateLimiter, build_rate_limit_store
from app.services.contact_dispatcher import ContactDispatcher
from app.services.contact_handler import ContactHandler
from app.services.email_provider import ResendEmailProvider


@lru_cache(maxsize=1)
def get_contact_handler() -> ContactHandler:
    """
    Process-wide contact handler dependency.

    Built once so the rate-limit table lives for the lifetime of the process
    and is shared by the HTTP app and the function adapter.

    Usage:
        @router.post("/contact")
        async def contact(handler: ContactHandler = Depends(get_contact_handler)):
            ...
    """
    store = build_rate_limit_store(settings.RATE_LIMIT_BACKEND, settings.REDIS_URL)
    rate_limiter = RateLimiter(
        store,
        window_seconds=settings.RATE_LIMIT_WINDOW_SECONDS,
        max_requests=settings.RATE_LIMIT_MAX_REQUESTS,
    )
    provider = ResendEmailProvider(
        api_key=(
            settings.RESEND_API_KEY.get_secret_value() if settings.RESEND_API_KEY else None
        ),
        api_url=settings.RESEND_API_URL,
        timeout=settings.RESEND_TIMEOUT,
    )
    dispatcher = ContactDispatcher(
        provider, sender=settings.sender, recipient=settings.RECIPIENT_EMAIL
    )
    return ContactHandler(
        rate_limiter,
        dispatcher,
        allowed_origins=settings.ALLOWED_ORIGINS,
        max_message_length=settings.MAX_MESSAGE_LENGTH,
        client_key_headers=settings.CLIENT_KEY_HEADERS,
    )
