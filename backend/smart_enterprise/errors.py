# Overview: Typed error taxonomy and the Flask handlers that render it.

"""
Every service raises one of the AppError subclasses below. The boundary layer
(register_error_handlers) turns them into the JSON envelope:

    {success: false, status, message, errors, timestamp}

Anything that is not an AppError is logged in full server-side and returned as
a generic 500. Stack traces only leave the process when EXPOSE_STACK_TRACES is
on (development).
"""

from __future__ import annotations

import logging
import traceback

from flask import current_app, jsonify, request
from werkzeug.exceptions import HTTPException

from .time_utils import iso_timestamp

security_logger = logging.getLogger("smart_enterprise.security")


class AppError(Exception):
    """Base class for errors that map to a client-visible status code."""

    status_code = 500
    default_message = "Internal Server Error"

    def __init__(self, message: str | None = None, errors: list | None = None):
        self.message = message or self.default_message
        self.errors = errors
        self.timestamp = iso_timestamp()
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {
            "success": False,
            "name": type(self).__name__,
            "status": self.status_code,
            "message": self.message,
            "errors": self.errors,
            "timestamp": self.timestamp,
        }


class ValidationError(AppError):
    """422: one or more fields failed validation; `errors` lists them."""

    status_code = 422
    default_message = "Validation failed"

    def __init__(self, message: str | None = None, errors: list | None = None):
        super().__init__(message, errors if errors is not None else [])


class BadRequestError(AppError):
    status_code = 400
    default_message = "Bad Request"


class UnauthorizedError(AppError):
    status_code = 401
    default_message = "Unauthorized"


class NotFoundError(AppError):
    status_code = 404
    default_message = "Resource not found"


class ConflictError(AppError):
    """409: uniqueness violation (duplicate email, phone, product triple)."""

    status_code = 409
    default_message = "Conflict"


class RateLimitedError(AppError):
    status_code = 429
    default_message = "Too many requests. Please try again later."

    def __init__(self, message: str | None = None, retry_after: int = 3600):
        super().__init__(message)
        self.retry_after = int(retry_after)

    def to_dict(self) -> dict:
        payload = super().to_dict()
        payload["retryAfter"] = self.retry_after
        return payload


class InternalError(AppError):
    status_code = 500


def field_error(field: str, message: str) -> dict:
    return {"field": field, "message": message}


def _render(err: AppError, stack: str | None = None):
    payload = err.to_dict()
    if stack and current_app.config.get("EXPOSE_STACK_TRACES"):
        payload["stack"] = stack
    return jsonify(payload), err.status_code


def register_error_handlers(app) -> None:
    """Attach the error envelope to the app. Most specific handlers first."""

    @app.errorhandler(RateLimitedError)
    def handle_rate_limited(err: RateLimitedError):
        security_logger.warning(
            "Rate limit exceeded ip=%s url=%s", request.remote_addr, request.path
        )
        response, status = _render(err)
        response.headers["Retry-After"] = str(err.retry_after)
        return response, status

    @app.errorhandler(AppError)
    def handle_app_error(err: AppError):
        if err.status_code >= 500:
            current_app.logger.error("%s: %s", type(err).__name__, err.message)
        elif err.status_code == 401:
            security_logger.warning("%s on %s %s", err.message, request.method, request.path)
        else:
            current_app.logger.info("%s: %s", type(err).__name__, err.message)
        return _render(err)

    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        if err.code == 404:
            message = f"Endpoint '{request.method} {request.path}' not found."
        else:
            message = err.description or err.name
        app_err = AppError(message)
        app_err.status_code = err.code or 500
        return _render(app_err)

    @app.errorhandler(Exception)
    def handle_unexpected(err: Exception):
        current_app.logger.exception("Unhandled error on %s %s", request.method, request.path)
        return _render(InternalError(), stack=traceback.format_exc())
