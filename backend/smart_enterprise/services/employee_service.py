# Overview: Employee directory: sign-up, profile updates, lookups and deactivation.

"""
Employee Service

WHY: Employees are both the people who operate the system and (with role
ROLE_DEALER) the counterparties that orders are placed for. Every other
record carries an employee_id in created_by.

RULES:
- Only admins (ROLE_ADMIN, ROLE_SUPER_ADMIN) create or deactivate accounts
- An employee may update their own profile; admins may update anyone
- Role and status changes are admin-only
- E-mail and phone are unique across all employees, active or not
- No hard delete: deactivation flips status to "inactive"

All field problems in one request are reported together in a single
ValidationError.
"""

from __future__ import annotations

import logging
import math

from sqlalchemy.exc import IntegrityError

from ..errors import ConflictError, NotFoundError, UnauthorizedError, BadRequestError, field_error
from ..extensions import db
from ..models import Employee
from ..roles import ACTIVE_STATUS, ASSIGNABLE_ROLES, INACTIVE_STATUS, Role, authorize, is_admin
from ..time_utils import stamp
from ..validation import (
    check_email,
    check_name,
    check_password,
    check_phone,
    normalize_email,
    raise_if_errors,
    sanitize_text,
)
from . import auth_service
from .identifier_service import EMPLOYEE_PREFIX, generate_unique

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ("shop_name", "district", "town", "brand", "address")
STATUSES = (ACTIVE_STATUS, INACTIVE_STATUS)

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100


def _check_role(value) -> str | None:
    role = Role.parse(value)
    if value is None or (isinstance(value, str) and not value.strip()):
        return "Role is required"
    if role not in ASSIGNABLE_ROLES:
        allowed = ", ".join(sorted(r.value for r in ASSIGNABLE_ROLES))
        return f"Role must be one of: {allowed}"
    return None


def _validate(data: dict, *, partial: bool) -> list[dict]:
    checks = (
        ("employee_name", check_name),
        ("employee_email", check_email),
        ("password", check_password),
        ("employee_phone", check_phone),
        ("role", _check_role),
    )
    errors = []
    for field, check in checks:
        if partial and field not in data:
            continue
        message = check(data.get(field))
        if message:
            errors.append(field_error(field, message))

    if "status" in data and data["status"] not in STATUSES:
        errors.append(field_error("status", f"Status must be one of: {', '.join(STATUSES)}"))
    return errors


def _ensure_unique(email: str | None, phone: str | None, exclude_id: int | None = None) -> None:
    def _exists(column, value) -> bool:
        q = db.session.query(Employee.id).filter(column == value)
        if exclude_id is not None:
            q = q.filter(Employee.id != exclude_id)
        return q.first() is not None

    if email is not None and _exists(Employee.employee_email, email):
        raise ConflictError("Email already exists. Please use a different email.")
    if phone is not None and _exists(Employee.employee_phone, phone):
        raise ConflictError("Phone number already exists. Please use a different phone number.")


def _commit_or_conflict() -> None:
    # Unique constraints back up the pre-checks when two requests race
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError("Email or phone number already exists.")


def create(request: dict) -> Employee:
    """
    Create an employee account (admin only).

    Raises ValidationError (422), ConflictError (409) or UnauthorizedError (401).
    """
    ctx = authorize("employee.create")
    if not request:
        raise BadRequestError("Request body is required")

    raise_if_errors(_validate(request, partial=False))

    email = normalize_email(request["employee_email"])
    phone = request["employee_phone"].strip()
    _ensure_unique(email, phone)

    employee = Employee(
        employee_id=generate_unique(Employee.employee_id, EMPLOYEE_PREFIX),
        employee_name=sanitize_text(request["employee_name"]),
        employee_email=email,
        employee_phone=phone,
        password_hash=auth_service.hash_password(request["password"]),
        role=Role.parse(request["role"]).value,
        status=ACTIVE_STATUS,
        created_by=ctx.employee_id,
    )
    for field in PROFILE_FIELDS:
        if request.get(field) is not None:
            setattr(employee, field, sanitize_text(request[field]))
    stamp(employee, created=True)

    db.session.add(employee)
    _commit_or_conflict()
    logger.info("Employee %s created by %s with role %s", employee.employee_id, ctx.employee_id, employee.role)
    return employee


def update(employee_id: str, partial: dict) -> Employee:
    """
    Update an employee profile.

    Self-service for the employee; admins may update anyone and are the only
    ones who may change role or status.
    """
    ctx = authorize("employee.update")
    caller_is_admin = is_admin(ctx.role)
    if ctx.employee_id != employee_id and not caller_is_admin:
        raise UnauthorizedError("You can only update your own profile.")
    if not caller_is_admin and ("role" in partial or "status" in partial):
        raise UnauthorizedError("Only administrators can change role or status.")

    employee = _get_active(employee_id)
    raise_if_errors(_validate(partial, partial=True))

    email = normalize_email(partial["employee_email"]) if "employee_email" in partial else None
    phone = partial["employee_phone"].strip() if "employee_phone" in partial else None
    _ensure_unique(
        email if email != employee.employee_email else None,
        phone if phone != employee.employee_phone else None,
        exclude_id=employee.id,
    )

    if "employee_name" in partial:
        employee.employee_name = sanitize_text(partial["employee_name"])
    if email is not None:
        employee.employee_email = email
    if phone is not None:
        employee.employee_phone = phone
    if "password" in partial:
        employee.password_hash = auth_service.hash_password(partial["password"])
    if "role" in partial:
        employee.role = Role.parse(partial["role"]).value
    if "status" in partial:
        employee.status = partial["status"]
    for field in PROFILE_FIELDS:
        if field in partial:
            setattr(employee, field, sanitize_text(partial[field]))

    stamp(employee)
    _commit_or_conflict()
    logger.info("Employee %s updated by %s", employee.employee_id, ctx.employee_id)
    return employee


def _get_active(employee_id: str) -> Employee:
    employee = (
        db.session.query(Employee)
        .filter(Employee.employee_id == employee_id, Employee.status == ACTIVE_STATUS)
        .one_or_none()
    )
    if employee is None:
        raise NotFoundError(f"Employee {employee_id} not found")
    return employee


def get_by_id(employee_id: str) -> Employee:
    authorize("employee.read")
    return _get_active(employee_id)


def list_active(page: int | None = None, limit: int | None = None) -> dict:
    """
    Page through active employees, newest first.

    Returns {employees: [...], pagination: {page, limit, total, pages}}.
    """
    authorize("employee.read")
    page = page if page and page > 0 else DEFAULT_PAGE
    limit = limit if limit and limit > 0 else DEFAULT_LIMIT
    limit = min(limit, MAX_LIMIT)

    base = db.session.query(Employee).filter(Employee.status == ACTIVE_STATUS)
    total = base.count()
    rows = (
        base.order_by(Employee.created_at.desc(), Employee.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return {
        "employees": [e.to_dict() for e in rows],
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "pages": math.ceil(total / limit) if total else 0,
        },
    }


def deactivate(employee_id: str) -> Employee:
    ctx = authorize("employee.deactivate")
    if ctx.employee_id == employee_id:
        raise BadRequestError("You cannot deactivate your own account.")

    employee = _get_active(employee_id)
    employee.status = INACTIVE_STATUS
    stamp(employee)
    db.session.commit()
    logger.info("Employee %s deactivated by %s", employee_id, ctx.employee_id)
    return employee


def list_all(include_inactive: bool = False) -> list[Employee]:
    """Unpaged listing for operator tooling (CLI). Does not consult the request context."""
    q = db.session.query(Employee)
    if not include_inactive:
        q = q.filter(Employee.status == ACTIVE_STATUS)
    return q.order_by(Employee.created_at.asc(), Employee.id.asc()).all()


def ensure_super_admin(*, email: str, password: str, name: str, phone: str) -> tuple[Employee, bool]:
    """
    Bootstrap the first ROLE_SUPER_ADMIN account if none exists.

    Returns (employee, created). Idempotent: an existing super admin is
    returned untouched.
    """
    existing = (
        db.session.query(Employee)
        .filter(Employee.role == Role.SUPER_ADMIN.value)
        .order_by(Employee.id.asc())
        .first()
    )
    if existing is not None:
        return existing, False

    errors = _validate(
        {
            "employee_name": name,
            "employee_email": email,
            "password": password,
            "employee_phone": phone,
        },
        partial=True,
    )
    raise_if_errors(errors)

    email = normalize_email(email)
    phone = phone.strip()
    _ensure_unique(email, phone)

    employee_id = generate_unique(Employee.employee_id, EMPLOYEE_PREFIX)
    employee = Employee(
        employee_id=employee_id,
        employee_name=sanitize_text(name),
        employee_email=email,
        employee_phone=phone,
        password_hash=auth_service.hash_password(password),
        role=Role.SUPER_ADMIN.value,
        status=ACTIVE_STATUS,
        created_by=employee_id,
    )
    stamp(employee, created=True)
    db.session.add(employee)
    _commit_or_conflict()
    logger.info("Default super admin %s created", employee_id)
    return employee, True
