"""
=============================================================================
CONTACT RELAY - RATE LIMITER MODULE
=============================================================================
Fixed-window request limiting per client key.

Features:
- Counter storage behind a small get/set store interface
- In-memory store for single-instance deployments
- Redis store for deployments sharing one counter table
- Client key derived from forwarding headers, "unknown" when none present

Usage:
    from app.core.rate_limiter import RateLimiter, InMemoryRateLimitStore

    limiter = RateLimiter(InMemoryRateLimitStore(), window_seconds=60, max_requests=5)
    if not limiter.allow(get_client_key(headers)):
        ...
=============================================================================
"""

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from threading import Lock
from typing import Callable, Dict, Iterable, Mapping, Optional

logger = logging.getLogger(__name__)

UNKNOWN_CLIENT_KEY = "unknown"
DEFAULT_CLIENT_KEY_HEADERS = ("client-ip", "x-forwarded-for")


@dataclass
class RateLimitEntry:
    """Request count for one client key and the absolute time its window ends."""

    count: int
    reset_at: float


# =============================================================================
# STORE ABSTRACTION
# =============================================================================


class RateLimitStore(ABC):
    """Storage for rate-limit entries addressed by client key."""

    name: str = "abstract"

    @abstractmethod
    def get(self, key: str) -> Optional[RateLimitEntry]:
        """Return the entry for ``key`` or None."""

    @abstractmethod
    def set(self, key: str, entry: RateLimitEntry) -> None:
        """Create or replace the entry for ``key``."""

    @abstractmethod
    def reset(self) -> None:
        """Clear all state (for tests)."""

    @abstractmethod
    def stats(self) -> dict:
        """Return debugging stats; ``backend`` is reported by the health endpoint."""


class InMemoryRateLimitStore(RateLimitStore):
    """Process-local store. Entries are never evicted, only overwritten."""

    name = "memory"

    def __init__(self) -> None:
        self._lock = Lock()
        self._entries: Dict[str, RateLimitEntry] = {}

    def get(self, key: str) -> Optional[RateLimitEntry]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            return RateLimitEntry(count=entry.count, reset_at=entry.reset_at)

    def set(self, key: str, entry: RateLimitEntry) -> None:
        with self._lock:
            self._entries[key] = RateLimitEntry(count=entry.count, reset_at=entry.reset_at)

    def reset(self) -> None:
        with self._lock:
            self._entries.clear()

    def stats(self) -> dict:
        with self._lock:
            return {
                "backend": self.name,
                "tracked_keys": len(self._entries),
                "counts": {key: entry.count for key, entry in self._entries.items()},
            }


class RedisRateLimitStore(RateLimitStore):
    """Redis-backed store; each entry expires when its window ends."""

    name = "redis"

    def __init__(self, redis_client, prefix: str = "rl:contact:") -> None:  # type: ignore[type-arg]
        self._redis = redis_client
        self._prefix = prefix

    def _key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    def get(self, key: str) -> Optional[RateLimitEntry]:
        data = self._redis.hgetall(self._key(key))
        if not data:
            return None
        try:
            return RateLimitEntry(
                count=int(data["count"]), reset_at=float(data["reset_at"])
            )
        except (KeyError, TypeError, ValueError):
            logger.warning("Discarding malformed rate-limit entry for key %s", key)
            return None

    def set(self, key: str, entry: RateLimitEntry) -> None:
        redis_key = self._key(key)
        pipe = self._redis.pipeline(transaction=True)
        pipe.hset(redis_key, mapping={"count": entry.count, "reset_at": entry.reset_at})
        pipe.pexpireat(redis_key, int(entry.reset_at * 1000) + 1)
        pipe.execute()

    def reset(self) -> None:
        cursor = 0
        while True:
            cursor, keys = self._redis.scan(cursor, match=f"{self._prefix}*", count=500)
            if keys:
                self._redis.delete(*keys)
            if cursor == 0:
                break

    def stats(self) -> dict:
        tracked = 0
        cursor = 0
        while True:
            cursor, keys = self._redis.scan(cursor, match=f"{self._prefix}*", count=500)
            tracked += len(keys)
            if cursor == 0:
                break
        return {"backend": self.name, "tracked_keys": tracked}


# =============================================================================
# LIMITER
# =============================================================================


class RateLimiter:
    """Fixed-window limiter: at most ``max_requests`` per key per window."""

    def __init__(
        self,
        store: RateLimitStore,
        window_seconds: float = 60.0,
        max_requests: int = 5,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.store = store
        self.window_seconds = window_seconds
        self.max_requests = max_requests
        self._clock = clock

    def allow(self, client_key: str) -> bool:
        now = self._clock()
        entry = self.store.get(client_key)

        if entry is None or now > entry.reset_at:
            self.store.set(
                client_key,
                RateLimitEntry(count=1, reset_at=now + self.window_seconds),
            )
            return True

        if entry.count >= self.max_requests:
            return False

        # Read-modify-write; concurrent callers on one key may under-count.
        entry.count += 1
        self.store.set(client_key, entry)
        return True


# =============================================================================
# CLIENT KEY
# =============================================================================


def get_client_key(
    headers: Mapping[str, str],
    header_names: Iterable[str] = DEFAULT_CLIENT_KEY_HEADERS,
) -> str:
    """Derive the rate-limit key from forwarding headers.

    ``headers`` must use lower-case names. For X-Forwarded-For the leftmost
    hop (the original client) is used.
    """
    for name in header_names:
        value = headers.get(name)
        if not value:
            continue
        value = value.split(",")[0].strip()
        if value:
            return value
    return UNKNOWN_CLIENT_KEY


# =============================================================================
# STORE INITIALIZATION
# =============================================================================


def build_rate_limit_store(backend: str, redis_url: Optional[str] = None) -> RateLimitStore:
    """Build the configured store, falling back to memory if Redis is unreachable."""
    if backend != "redis":
        return InMemoryRateLimitStore()

    import redis as _redis_lib

    try:
        client = _redis_lib.Redis.from_url(
            redis_url, decode_responses=True, socket_connect_timeout=2
        )
        client.ping()
    except _redis_lib.RedisError as exc:
        logger.warning(
            "Redis unavailable for rate limiter, using in-memory fallback: %s", exc
        )
        return InMemoryRateLimitStore()

    logger.info("Rate limiter using Redis backend")
    return RedisRateLimitStore(client)
