"""CORS headers for the contact endpoint.

The endpoint answers its own preflight, so headers are computed per request
instead of through CORSMiddleware:
- Allow-list configured: echo Origin when listed, otherwise "null"
- No allow-list: "*"
"""
from typing import Dict, Optional, Sequence

ALLOW_HEADERS = "Content-Type, Authorization"
ALLOW_METHODS = "POST, OPTIONS"
DENIED_ORIGIN = "null"


def resolve_allowed_origin(origin: Optional[str], allowed_origins: Sequence[str]) -> str:
    if not allowed_origins:
        return "*"
    if origin and origin in allowed_origins:
        return origin
    return DENIED_ORIGIN


def build_cors_headers(origin: Optional[str], allowed_origins: Sequence[str]) -> Dict[str, str]:
    """Headers attached to every contact endpoint response."""
    return {
        "Access-Control-Allow-Origin": resolve_allowed_origin(origin, allowed_origins),
        "Access-Control-Allow-Headers": ALLOW_HEADERS,
        "Access-Control-Allow-Methods": ALLOW_METHODS,
        "Content-Type": "application/json",
    }
