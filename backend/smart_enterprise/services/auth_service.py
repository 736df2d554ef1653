# Overview: Credential hashing, sign-in and token revocation.

"""
Authentication Service

WHY: Every action must be attributable to an employee. Sign-in exchanges an
e-mail and password for a signed bearer token; logout revokes it.

SECURITY NOTES:
- Passwords hashed with bcrypt (cost factor from BCRYPT_ROUNDS)
- Unknown e-mail and wrong password produce the same error and cost the
  same bcrypt work, so responses do not reveal which accounts exist
- Only active employees can sign in
- Revoked tokens stay rejected until their original expiry
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime

import bcrypt
from flask import current_app

from ..errors import UnauthorizedError
from ..extensions import db
from ..models import Employee
from ..roles import ACTIVE_STATUS
from ..validation import normalize_email
from . import token_service
from .token_blacklist_service import get_blacklist

logger = logging.getLogger(__name__)
security_logger = logging.getLogger("smart_enterprise.security")

INVALID_CREDENTIALS = "Invalid credentials"

_dummy_hashes: dict[int, bytes] = {}


@dataclass
class AuthResult:
    employee_id: str
    role: str
    status: str
    token: str
    expires_at: datetime
    expires_in: int
    employee: Employee

    def to_dict(self) -> dict:
        return {
            "employee_id": self.employee_id,
            "role": self.role,
            "status": self.status,
            "token": self.token,
            "expires_at": self.expires_at.isoformat().replace("+00:00", "Z"),
            "expires_in": self.expires_in,
            "employee": self.employee.to_dict(),
        }


def _rounds() -> int:
    return int(current_app.config.get("BCRYPT_ROUNDS", 10))


def hash_password(password: str) -> str:
    """Hash with bcrypt. Strength is validated by the caller before hashing."""
    salt = bcrypt.gensalt(rounds=_rounds())
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify password against bcrypt hash.

    bcrypt.checkpw compares in constant time. A malformed stored hash makes
    bcrypt raise ValueError; that counts as a mismatch.
    """
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        logger.warning("Stored password hash is not a valid bcrypt hash")
        return False


def _dummy_hash() -> bytes:
    rounds = _rounds()
    if rounds not in _dummy_hashes:
        _dummy_hashes[rounds] = bcrypt.hashpw(b"not-a-real-password", bcrypt.gensalt(rounds=rounds))
    return _dummy_hashes[rounds]


def authenticate(email: str, password: str) -> AuthResult:
    """
    Exchange credentials for a token.

    Raises UnauthorizedError("Invalid credentials") for an unknown or inactive
    e-mail and for a wrong password alike.
    """
    email = normalize_email(email)
    password = password if isinstance(password, str) else ""

    employee = (
        db.session.query(Employee)
        .filter(Employee.employee_email == email, Employee.status == ACTIVE_STATUS)
        .one_or_none()
    )

    if employee is None:
        bcrypt.checkpw(password.encode("utf-8"), _dummy_hash())
        security_logger.warning("Failed sign-in for unknown or inactive email")
        raise UnauthorizedError(INVALID_CREDENTIALS)

    if not verify_password(password, employee.password_hash):
        security_logger.warning("Failed sign-in for employee_id=%s", employee.employee_id)
        raise UnauthorizedError(INVALID_CREDENTIALS)

    token, expires_at = token_service.sign(employee.employee_id, employee.role, employee.status)
    expires_in = int(current_app.config["JWT_EXPIRES_SECONDS"])
    logger.info("Employee %s signed in", employee.employee_id)

    return AuthResult(
        employee_id=employee.employee_id,
        role=employee.role,
        status=employee.status,
        token=token,
        expires_at=expires_at,
        expires_in=expires_in,
        employee=employee,
    )


def revoke(token: str) -> bool:
    """
    Blacklist `token` for the rest of its lifetime.

    Returns True when the token was stored, False when it had already expired.
    Raises UnauthorizedError("Invalid token") when no `exp` can be read.
    """
    claims = token_service.decode_unverified(token) if token else None
    exp = claims.get("exp") if claims else None
    if not isinstance(exp, (int, float)):
        raise UnauthorizedError("Invalid token")

    ttl = exp - time.time()
    stored = get_blacklist().add(token, ttl)
    if stored:
        logger.info("Token revoked for employee_id=%s (ttl=%ds)", claims.get("employee_id"), int(ttl))
    return stored


def is_revoked(token: str) -> bool:
    return get_blacklist().is_revoked(token)
