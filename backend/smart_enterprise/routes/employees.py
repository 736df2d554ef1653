# Overview: Employee directory endpoints.

from flask import Blueprint, request

from ..decorators import require_auth
from ..rate_limit import rate_limit
from ..responses import api_response
from ..services import employee_service
from ..validation import require_json_object

employees_bp = Blueprint("employees", __name__, url_prefix="/api/v1/employees")


@employees_bp.post("/signup")
@require_auth
@rate_limit("signup")
def signup_route():
    """Admin-only account creation."""
    data = require_json_object(request.get_json(silent=True))
    employee = employee_service.create(data)
    return api_response(employee.to_dict(), message="Account created successfully", status=201)


@employees_bp.get("")
@require_auth
def list_employees_route():
    page = request.args.get("page", type=int)
    limit = request.args.get("limit", type=int)
    return api_response(employee_service.list_active(page, limit), message="Employees retrieved")


@employees_bp.get("/<employee_id>")
@require_auth
def get_employee_route(employee_id: str):
    employee = employee_service.get_by_id(employee_id)
    return api_response(employee.to_dict(), message="Employee retrieved")


@employees_bp.put("/<employee_id>")
@require_auth
def update_employee_route(employee_id: str):
    data = require_json_object(request.get_json(silent=True))
    employee = employee_service.update(employee_id, data)
    return api_response(employee.to_dict(), message="Employee updated successfully")


@employees_bp.delete("/<employee_id>")
@require_auth
def deactivate_employee_route(employee_id: str):
    employee = employee_service.deactivate(employee_id)
    return api_response(employee.to_dict(), message="Employee deactivated")
