from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.api.routes import health
from app.api.v1 import contact
from app.core.config import settings
from app.core.errors import register_exception_handlers
from app.core.logging import setup_logging
from app.core.middleware import RequestIdMiddleware

# Setup logging
logger = setup_logging()


tags_metadata = [
    {
        "name": "contact",
        "description": "**Contact** - Public contact form relayed to the site owner by email.",
    },
    {
        "name": "health",
        "description": "**Health** - Liveness probe.",
    },
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events"""
    logger.info(
        "starting",
        project=settings.PROJECT_NAME,
        version=settings.VERSION,
        environment=settings.ENVIRONMENT,
        debug=settings.DEBUG,
    )

    yield

    logger.info("shutting_down")


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    description="""
## Contact Relay API

Receives website contact form submissions, validates them, applies per-client
rate limiting and relays them to the site owner through a transactional email
provider.
    """,
    openapi_tags=tags_metadata,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url=f"{settings.API_V1_PREFIX}/openapi.json",
)

# CORS headers are set by the contact handler itself (see app.core.cors).

# Request ID Tracing
app.add_middleware(RequestIdMiddleware)

# Register global exception handlers
register_exception_handlers(app)

app.include_router(
    contact.router, prefix=settings.API_V1_PREFIX, tags=["contact"]
)

app.include_router(health.router)
