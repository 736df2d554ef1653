"""
Token blacklist and revocation tests.

Verifies:
- Entries expire at their TTL (lazy eviction and sweep)
- Already-expired tokens are not stored
- The sweeper thread removes expired entries
- auth_service.revoke() derives the TTL from the token's exp claim
"""

import time

import pytest

from smart_enterprise.errors import UnauthorizedError
from smart_enterprise.services import auth_service
from smart_enterprise.services.token_blacklist_service import TokenBlacklist

from conftest import token_for


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


class TestTokenBlacklist:

    def test_revoked_until_expiry(self):
        clock = FakeClock()
        bl = TokenBlacklist(clock=clock)
        assert bl.add("tok", 60) is True

        clock.now += 59
        assert bl.is_revoked("tok") is True

        clock.now += 1
        assert bl.is_revoked("tok") is False
        assert len(bl) == 0  # evicted on read

    def test_non_positive_ttl_not_stored(self):
        bl = TokenBlacklist(clock=FakeClock())
        assert bl.add("tok", 0) is False
        assert bl.add("tok2", -5) is False
        assert len(bl) == 0

    def test_unknown_token_not_revoked(self):
        assert TokenBlacklist().is_revoked("never-seen") is False

    def test_sweep_removes_only_expired(self):
        clock = FakeClock()
        bl = TokenBlacklist(clock=clock)
        bl.add("short", 10)
        bl.add("long", 100)

        clock.now += 50
        assert bl.sweep() == 1
        assert len(bl) == 1
        assert bl.is_revoked("long")

    def test_sweeper_thread(self):
        clock = FakeClock()
        bl = TokenBlacklist(clock=clock)
        bl.add("tok", 5)
        clock.now += 10

        bl.start_sweeper(0.01)
        try:
            deadline = time.time() + 2
            while len(bl) and time.time() < deadline:
                time.sleep(0.01)
        finally:
            bl.stop_sweeper()

        assert len(bl) == 0


class TestRevoke:

    def test_revoke_live_token(self, admin):
        token = token_for(admin)
        assert auth_service.is_revoked(token) is False
        assert auth_service.revoke(token) is True
        assert auth_service.is_revoked(token) is True

    def test_revoke_expired_token_is_noop(self, admin):
        token = token_for(admin, expires_in=-10)
        assert auth_service.revoke(token) is False
        assert auth_service.is_revoked(token) is False

    def test_revoke_unreadable_token(self):
        with pytest.raises(UnauthorizedError) as exc:
            auth_service.revoke("not-a-jwt")
        assert exc.value.message == "Invalid token"
