# Overview: Request-scoped identity/tenant context.

"""
Each inbound request gets its own RequestContext, stored in a ContextVar so a
value bound in one request's thread (or task) is never visible to another.

Lifecycle:
- before_request: bind an empty context carrying the X-Tenant-Id header
- @require_auth: fill employee_id / role / status / token from the verified JWT
- teardown_request: reset to whatever was bound before the request

Code outside a request (CLI, tests, worker threads) binds explicitly with
`bound_context(...)`. When nothing is bound, getters return None and
`get_context()` returns a fresh empty context.
"""

from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar, Token
from dataclasses import dataclass, replace
from typing import Iterator, Optional


@dataclass
class RequestContext:
    tenant: Optional[str] = None
    employee_id: Optional[str] = None
    role: Optional[str] = None
    status: Optional[str] = None
    token: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.employee_id and self.role)


_current: ContextVar[Optional[RequestContext]] = ContextVar("request_context", default=None)


def set_context(ctx: RequestContext) -> Token:
    """Bind `ctx` for the current execution scope. Keep the token to reset later."""
    return _current.set(ctx)


def reset_context(token: Token) -> None:
    _current.reset(token)


def get_context() -> RequestContext:
    ctx = _current.get()
    if ctx is None:
        return RequestContext()
    return ctx


def clear_context() -> None:
    _current.set(RequestContext())


@contextmanager
def bound_context(ctx: RequestContext | None = None, **fields) -> Iterator[RequestContext]:
    """
    Bind a context for the duration of a `with` block.

        with bound_context(employee_id="EMP-1", role="ROLE_ADMIN"):
            products_service.create_product(dto)
    """
    ctx = replace(ctx, **fields) if ctx is not None else RequestContext(**fields)
    token = set_context(ctx)
    try:
        yield ctx
    finally:
        reset_context(token)


def _ensure_bound() -> RequestContext:
    ctx = _current.get()
    if ctx is None:
        ctx = RequestContext()
        _current.set(ctx)
    return ctx


def get_current_tenant() -> Optional[str]:
    return get_context().tenant


def set_current_tenant(tenant: Optional[str]) -> None:
    _ensure_bound().tenant = tenant


def get_role() -> Optional[str]:
    return get_context().role


def set_role(role: Optional[str]) -> None:
    _ensure_bound().role = role


def get_employee_id() -> Optional[str]:
    return get_context().employee_id


def set_employee_id(employee_id: Optional[str]) -> None:
    _ensure_bound().employee_id = employee_id


def get_status() -> Optional[str]:
    return get_context().status


def set_status(status: Optional[str]) -> None:
    _ensure_bound().status = status


def get_current_token() -> Optional[str]:
    return get_context().token


def set_current_token(token: Optional[str]) -> None:
    _ensure_bound().token = token
