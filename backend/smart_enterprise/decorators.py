# Overview: Request decorators for API routes.

from functools import wraps

from flask import request

from .errors import UnauthorizedError
from .request_context import set_current_token, set_employee_id, set_role, set_status
from .services import auth_service, token_service


def _bearer_token() -> str | None:
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def require_auth(f):
    """
    Require a valid, unrevoked bearer token and bind its identity.

    Fills the request's RequestContext with employee_id, role, status and
    the raw token so services can call authorize().

    SECURITY: Raises UnauthorizedError (401) if:
    - No Authorization header or not a Bearer token
    - Signature invalid or token expired
    - Token was revoked by logout
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        token = _bearer_token()
        if token is None:
            raise UnauthorizedError("Authentication required")

        claims = token_service.verify(token)
        if auth_service.is_revoked(token):
            raise UnauthorizedError("Invalid or expired token")

        set_employee_id(claims.employee_id)
        set_role(claims.role)
        set_status(claims.status)
        set_current_token(token)

        return f(*args, **kwargs)

    return decorated_function

