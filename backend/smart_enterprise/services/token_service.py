# Overview: Signed bearer tokens (JWT) carrying employee identity claims.

"""
Token Service

Tokens are HS256 JWTs signed with JWT_SECRET_KEY. Claims:

    employee_id, role, status, iat, exp

A token is self-contained: verification does not touch the database.
Revocation before `exp` is handled by the token blacklist.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt
from flask import current_app

from ..errors import UnauthorizedError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TokenClaims:
    employee_id: str
    role: str
    status: str
    iat: int
    exp: int


def _secret() -> str:
    return current_app.config["JWT_SECRET_KEY"]


def _algorithm() -> str:
    return current_app.config.get("JWT_ALGORITHM", "HS256")


def sign(employee_id: str, role: str, status: str, *, expires_in: int | None = None) -> tuple[str, datetime]:
    """
    Issue a token for the given identity.

    Returns (token, expires_at) where expires_at is timezone-aware UTC.
    """
    if expires_in is None:
        expires_in = int(current_app.config["JWT_EXPIRES_SECONDS"])
    now = datetime.now(timezone.utc)
    expires_at = now + timedelta(seconds=expires_in)
    payload = {
        "employee_id": employee_id,
        "role": role,
        "status": status,
        "iat": int(now.timestamp()),
        "exp": int(expires_at.timestamp()),
    }
    token = jwt.encode(payload, _secret(), algorithm=_algorithm())
    return token, expires_at


def verify(token: str) -> TokenClaims:
    """
    Check signature and expiry and return the claims.

    Raises UnauthorizedError("Invalid or expired token") on any failure.
    """
    try:
        data = jwt.decode(
            token,
            _secret(),
            algorithms=[_algorithm()],
            options={"require": ["exp", "iat"]},
        )
    except jwt.ExpiredSignatureError:
        logger.info("Rejected expired token")
        raise UnauthorizedError("Invalid or expired token")
    except jwt.InvalidTokenError as exc:
        logger.info("Rejected invalid token: %s", exc)
        raise UnauthorizedError("Invalid or expired token")

    try:
        return TokenClaims(
            employee_id=data["employee_id"],
            role=data["role"],
            status=data["status"],
            iat=int(data["iat"]),
            exp=int(data["exp"]),
        )
    except (KeyError, TypeError, ValueError):
        raise UnauthorizedError("Invalid or expired token")


def decode_unverified(token: str) -> dict | None:
    """
    Read claims without checking the signature.

    Used only by logout to learn `exp` for the blacklist TTL. Returns None
    when the token cannot be parsed at all.
    """
    try:
        return jwt.decode(token, options={"verify_signature": False, "verify_exp": False})
    except jwt.InvalidTokenError:
        return None
