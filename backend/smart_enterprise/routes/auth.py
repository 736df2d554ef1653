# Overview: Sign-in and logout endpoints.

"""
Authentication API routes

SECURITY FEATURES:
- Sign-in is rate limited per client address
- Unknown e-mail and wrong password return the same 401
- Logout revokes the presented token until it would have expired
"""

from flask import Blueprint, current_app, request

from ..decorators import require_auth
from ..errors import BadRequestError
from ..request_context import get_current_token, get_employee_id
from ..rate_limit import rate_limit
from ..responses import api_response
from ..services import auth_service

auth_bp = Blueprint("auth", __name__, url_prefix="/api/v1/auth")


@auth_bp.post("/signin")
@rate_limit("signin")
def signin_route():
    data = request.get_json(silent=True) or {}
    email = data.get("employee_email") or data.get("email")
    password = data.get("password")
    if not email or not password:
        raise BadRequestError("Email and password are required")

    result = auth_service.authenticate(email, password)
    return api_response(result.to_dict(), message="Login successful")


@auth_bp.post("/logout")
@require_auth
def logout_route():
    auth_service.revoke(get_current_token())
    current_app.logger.info("Employee %s logged out", get_employee_id())
    return api_response(message="Logged out successfully")
