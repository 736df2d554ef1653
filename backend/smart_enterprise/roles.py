# Overview: Closed role set and the allowed-roles-per-operation table.

"""
Role-based access control.

DESIGN:
- Roles are a closed Enum; the stored/JWT value is the string ("ROLE_ADMIN").
- OPERATION_ROLES is the single table that says who may do what.
  A value of None means "any authenticated, active employee".
- authorize() is the Authorization Guard: it reads the RequestContext and
  fails closed with UnauthorizedError.
"""

from __future__ import annotations

from enum import Enum

from .errors import UnauthorizedError
from .request_context import RequestContext, get_context


class Role(str, Enum):
    SUPER_ADMIN = "ROLE_SUPER_ADMIN"
    ADMIN = "ROLE_ADMIN"
    SUPERVISOR = "ROLE_SUPERVISOR"
    MANAGER = "ROLE_MANAGER"
    SALESMAN = "ROLE_SALESMAN"
    DEALER = "ROLE_DEALER"

    @classmethod
    def parse(cls, value) -> "Role | None":
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().upper())
        except ValueError:
            return None


ACTIVE_STATUS = "active"
INACTIVE_STATUS = "inactive"

ADMIN_ROLES = frozenset({Role.SUPER_ADMIN, Role.ADMIN})

# Roles an admin may hand out through sign-up; the super admin is bootstrapped by CLI only.
ASSIGNABLE_ROLES = frozenset(set(Role) - {Role.SUPER_ADMIN})

OPERATION_ROLES: dict[str, frozenset[Role] | None] = {
    "employee.create": ADMIN_ROLES,
    "employee.deactivate": ADMIN_ROLES,
    "employee.read": None,
    "employee.update": None,  # ownership is checked by the service
    "product.create": ADMIN_ROLES,
    "product.update": ADMIN_ROLES,
    "product.read": None,
    "stock.apply": frozenset({Role.SUPER_ADMIN, Role.ADMIN, Role.MANAGER, Role.SUPERVISOR}),
    "stock.read": None,
    "order.create": frozenset({Role.SUPER_ADMIN, Role.ADMIN, Role.SALESMAN}),
    "order.read": None,
}

DENIAL_MESSAGES = {
    "employee.create": "Access denied: Only administrators are authorized to perform this action.",
    "product.create": "Only admins can create products.",
    "product.update": "Only admins can update products.",
}


def is_admin(role) -> bool:
    return Role.parse(role) in ADMIN_ROLES


def authorize(operation: str) -> RequestContext:
    """
    Check the current caller may perform `operation`.

    Returns the bound RequestContext on success.
    Raises UnauthorizedError when identity is missing, the account is not
    active, or the role is outside the operation's allowed set.
    Raises KeyError for an unknown operation name.
    """
    allowed = OPERATION_ROLES[operation]
    ctx = get_context()

    if not ctx.is_authenticated:
        raise UnauthorizedError("Authentication required")

    if ctx.status and ctx.status != ACTIVE_STATUS:
        raise UnauthorizedError("Account is not active")

    if allowed is None:
        return ctx

    if Role.parse(ctx.role) not in allowed:
        raise UnauthorizedError(
            DENIAL_MESSAGES.get(operation, "Access denied: insufficient role for this action.")
        )
    return ctx
