import pytest
from fastapi.testclient import TestClient

from app.api.deps import get_contact_handler
from app.core.rate_limiter import InMemoryRateLimitStore, RateLimiter
from app.main import app
from app.services.contact_dispatcher import ContactDispatcher
from app.services.contact_handler import ContactHandler
from doubles import FakeClock, RecordingProvider

SENDER = "Website <noreply@example.com>"
RECIPIENT = "owner@example.com"


# -----------------------------------------------------------------------------
# Handler Fixtures
# -----------------------------------------------------------------------------


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def provider() -> RecordingProvider:
    return RecordingProvider()


@pytest.fixture()
def rate_limiter(clock) -> RateLimiter:
    return RateLimiter(
        InMemoryRateLimitStore(), window_seconds=60, max_requests=5, clock=clock
    )


@pytest.fixture()
def contact_handler(rate_limiter, provider) -> ContactHandler:
    dispatcher = ContactDispatcher(provider, sender=SENDER, recipient=RECIPIENT)
    return ContactHandler(rate_limiter, dispatcher)


# -----------------------------------------------------------------------------
# Client Fixtures
# -----------------------------------------------------------------------------


@pytest.fixture()
def client(contact_handler):
    """
    TestClient whose contact handler uses a fresh rate-limit table and a
    recording provider.
    """
    app.dependency_overrides[get_contact_handler] = lambda: contact_handler

    # Using 'with' context manager to trigger lifespan events (startup/shutdown)
    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()
