# Overview: In-memory revocation list for tokens that were logged out before expiry.

"""
Token Blacklist

WHY: JWTs stay valid until `exp`. Logout puts the token here with a TTL equal
to its remaining lifetime so it is rejected for the rest of that window.

STORAGE: A process-local dict {token: expires_at_epoch} guarded by a lock.
Entries are evicted lazily on lookup and periodically by a daemon sweeper
thread. Contents are lost on restart; a multi-process deployment needs a
shared store.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Dict

logger = logging.getLogger(__name__)


class TokenBlacklist:
    def __init__(self, clock: Callable[[], float] = time.time):
        self._entries: Dict[str, float] = {}
        self._lock = threading.Lock()
        self._clock = clock
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def add(self, token: str, ttl_seconds: float) -> bool:
        """
        Revoke `token` for `ttl_seconds`.

        A non-positive TTL means the token has already expired; nothing is
        stored and False is returned.
        """
        if not token or ttl_seconds <= 0:
            return False
        expires_at = self._clock() + ttl_seconds
        with self._lock:
            self._entries[token] = expires_at
        return True

    def is_revoked(self, token: str) -> bool:
        with self._lock:
            expires_at = self._entries.get(token)
            if expires_at is None:
                return False
            if expires_at <= self._clock():
                del self._entries[token]
                return False
            return True

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def sweep(self) -> int:
        """Drop expired entries. Returns how many were removed."""
        now = self._clock()
        with self._lock:
            expired = [t for t, exp in self._entries.items() if exp <= now]
            for token in expired:
                del self._entries[token]
        if expired:
            logger.debug("Token blacklist sweep removed %d entries", len(expired))
        return len(expired)

    def start_sweeper(self, interval_seconds: float) -> None:
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._run_sweeper,
            args=(interval_seconds,),
            name="token-blacklist-sweeper",
            daemon=True,
        )
        self._thread.start()

    def stop_sweeper(self, timeout: float | None = 1.0) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    def _run_sweeper(self, interval_seconds: float) -> None:
        while not self._stop.wait(interval_seconds):
            try:
                self.sweep()
            except Exception:
                logger.exception("Token blacklist sweep failed")


def init_token_blacklist(app) -> TokenBlacklist:
    blacklist = TokenBlacklist()
    app.extensions["token_blacklist"] = blacklist
    if app.config.get("TOKEN_BLACKLIST_SWEEPER_ENABLED", True):
        blacklist.start_sweeper(app.config["TOKEN_BLACKLIST_SWEEP_SECONDS"])
    return blacklist


def get_blacklist() -> TokenBlacklist:
    from flask import current_app
    return current_app.extensions["token_blacklist"]
