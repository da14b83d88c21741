"""Per-client sliding-window rate limiting for chat endpoints."""

import logging
import threading
import time
from collections import deque
from functools import lru_cache

from fastapi import Request
from slowapi.util import get_remote_address

from src.config import get_settings

logger = logging.getLogger(__name__)


def get_client_identity(request: Request) -> str:
    """Get rate limit key: first X-Forwarded-For hop, socket address otherwise."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop
    return get_remote_address(request)


def _now_ms() -> int:
    return int(time.time() * 1000)


class SlidingWindowRateLimiter:
    """
    In-process sliding-window limiter keyed by client identity.

    Only requests inside the trailing window count toward the limit.
    State is per process; every instance of a scaled deployment enforces
    its own window.
    """

    def __init__(self, window_ms: int = 60_000, max_requests: int = 20):
        self.window_ms = window_ms
        self.max_requests = max_requests
        self._lock = threading.Lock()
        self._log: dict[str, deque[int]] = {}
        self._last_sweep_ms = 0

    def admit(self, identity: str, now: int | None = None) -> bool:
        """
        Record a request for identity if it is under the limit.

        Args:
            identity: Rate limit bucket key (client address)
            now: Request time in milliseconds since epoch (defaults to clock)

        Returns:
            True if admitted, False if the window is full
        """
        if now is None:
            now = _now_ms()

        with self._lock:
            if now - self._last_sweep_ms >= self.window_ms:
                self._sweep_locked(now)

            timestamps = self._log.get(identity)
            if timestamps is None:
                timestamps = deque()
            while timestamps and now - timestamps[0] >= self.window_ms:
                timestamps.popleft()

            if len(timestamps) >= self.max_requests:
                return False

            timestamps.append(now)
            self._log[identity] = timestamps
            return True

    def sweep(self, now: int | None = None) -> int:
        """Drop identities with no requests inside the window. Returns count dropped."""
        if now is None:
            now = _now_ms()
        with self._lock:
            return self._sweep_locked(now)

    def _sweep_locked(self, now: int) -> int:
        stale = [
            identity
            for identity, timestamps in self._log.items()
            if not timestamps or now - timestamps[-1] >= self.window_ms
        ]
        for identity in stale:
            del self._log[identity]
        self._last_sweep_ms = now
        if stale:
            logger.debug("Swept %d idle rate limit entries", len(stale))
        return len(stale)

    def tracked_identities(self) -> int:
        with self._lock:
            return len(self._log)

    def reset(self) -> None:
        with self._lock:
            self._log.clear()
            self._last_sweep_ms = 0


_limiter_lock = threading.Lock()


@lru_cache
def _create_rate_limiter() -> SlidingWindowRateLimiter:
    settings = get_settings()
    return SlidingWindowRateLimiter(
        window_ms=settings.rate_limit_window_seconds * 1000,
        max_requests=settings.rate_limit_max_requests,
    )


def get_rate_limiter() -> SlidingWindowRateLimiter:
    """Get process-wide rate limiter instance (dependency injection)."""
    # lru_cache alone may build twice under concurrent first calls
    with _limiter_lock:
        return _create_rate_limiter()
