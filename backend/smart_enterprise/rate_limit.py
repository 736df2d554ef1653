# Overview: Sliding-window request limits for the whole API and for sign-in and sign-up.

"""
Rate limiting for brute force and request flooding.

In-memory sliding window per client key. Each worker process keeps its own
counters; a multi-process deployment needs a shared store instead.
"""
from __future__ import annotations

import logging
import math
import threading
import time
from collections import defaultdict
from functools import wraps
from typing import Callable, Dict, List, Tuple

from flask import current_app, request

from .errors import RateLimitedError

logger = logging.getLogger(__name__)

CLEANUP_INTERVAL_SECONDS = 300
EXEMPT_PATHS = {"/health"}


class RateLimiter:
    """Sliding-window limiter: at most `requests` hits per `window` seconds per key."""

    def __init__(self, requests: int, window: int, *, message: str | None = None, clock: Callable[[], float] = time.time):
        self.requests = requests
        self.window = window
        self.message = message
        self._clock = clock
        self._hits: Dict[str, List[float]] = defaultdict(list)
        self._lock = threading.Lock()
        self._last_cleanup = clock()

    @classmethod
    def from_limit(cls, limit: str, **kwargs) -> "RateLimiter":
        """Build from a "<requests>/<seconds>" string, e.g. "5/900"."""
        requests, _, window = limit.partition("/")
        return cls(int(requests), int(window), **kwargs)

    def hit(self, key: str) -> Tuple[bool, int, int]:
        """
        Record a request for `key`.

        Returns (allowed, remaining, retry_after_seconds).
        """
        now = self._clock()
        with self._lock:
            if now - self._last_cleanup > CLEANUP_INTERVAL_SECONDS:
                self._cleanup(now)
                self._last_cleanup = now

            cutoff = now - self.window
            stamps = [ts for ts in self._hits[key] if ts > cutoff]

            if len(stamps) < self.requests:
                stamps.append(now)
                self._hits[key] = stamps
                return True, self.requests - len(stamps), 0

            self._hits[key] = stamps
            retry_after = max(1, math.ceil(stamps[0] + self.window - now))
            return False, 0, retry_after

    def reset(self) -> None:
        with self._lock:
            self._hits.clear()

    def _cleanup(self, now: float) -> None:
        cutoff = now - self.window
        for key in list(self._hits.keys()):
            stamps = [ts for ts in self._hits[key] if ts > cutoff]
            if stamps:
                self._hits[key] = stamps
            else:
                del self._hits[key]
        logger.debug("Rate limiter cleanup: %d active clients", len(self._hits))


def init_rate_limiters(app) -> None:
    """Create the global and named limiters from config and hook the global one."""
    limiters = {
        "global": RateLimiter.from_limit(
            app.config["RATELIMIT_GLOBAL"],
            message="Too many requests from this IP. Please try again later.",
        ),
        "signin": RateLimiter.from_limit(
            app.config["RATELIMIT_SIGNIN"],
            message="Too many login attempts. Please try again later.",
        ),
        "signup": RateLimiter.from_limit(
            app.config["RATELIMIT_SIGNUP"],
            message="Too many account creation attempts. Please try again later.",
        ),
    }
    app.extensions["rate_limiters"] = limiters

    @app.before_request
    def apply_global_rate_limit():
        if request.path in EXEMPT_PATHS:
            return None
        check_rate_limit("global")
        return None


def _client_key() -> str:
    return f"ip:{request.remote_addr or 'unknown'}"


def check_rate_limit(name: str) -> None:
    if not current_app.config.get("RATELIMIT_ENABLED", True):
        return
    limiter: RateLimiter = current_app.extensions["rate_limiters"][name]
    allowed, _remaining, retry_after = limiter.hit(f"{name}:{_client_key()}")
    if not allowed:
        raise RateLimitedError(limiter.message, retry_after=retry_after)


def rate_limit(name: str):
    """Apply the named limiter to a route."""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            check_rate_limit(name)
            return f(*args, **kwargs)
        return decorated_function
    return decorator
