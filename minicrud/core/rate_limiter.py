from __future__ import annotations

import threading
import time
from typing import Dict, Tuple

from fastapi import Request

from minicrud.core.config import get_settings
from minicrud.core.errors import RateLimited


class _RateLimiter:
    """Fixed-window counter per key, kept in process memory."""

    def __init__(self) -> None:
        self._hits: Dict[str, Tuple[int, float]] = {}
        self._lock = threading.Lock()

    def check(self, key: str, limit: int, window_seconds: int) -> None:
        """Count one hit for ``key``; raise ``RateLimited`` past ``limit`` in the window.

        A ``limit`` of zero or less turns throttling off (``AUTH_RATE_LIMIT=0``).
        """
        if limit <= 0:
            return
        now = time.time()
        with self._lock:
            count, reset = self._hits.get(key, (0, now + window_seconds))
            if now > reset:
                count = 0
                reset = now + window_seconds
            count += 1
            self._hits[key] = (count, reset)
            if count > limit:
                raise RateLimited()

    def reset(self) -> None:
        with self._lock:
            self._hits.clear()


_limiter = _RateLimiter()


def _client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def rate_limit_auth(request: Request, scope: str) -> None:
    """Throttle login/register attempts per client IP using the configured window."""
    settings = get_settings()
    key = f"{scope}:{_client_ip(request)}"
    _limiter.check(key, settings.auth_rate_limit, settings.auth_rate_window_seconds)


def reset_limits() -> None:
    _limiter.reset()
