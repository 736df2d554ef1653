# Overview: Dealer order endpoints.

from flask import Blueprint, request

from ..decorators import require_auth
from ..responses import api_response
from ..services import order_service
from ..validation import require_json_object

orders_bp = Blueprint("orders", __name__, url_prefix="/api/v1/orders")


@orders_bp.post("")
@require_auth
def create_order_route():
    data = require_json_object(request.get_json(silent=True))
    result = order_service.create_order(data)
    return api_response(result, message="Order created successfully", status=201)


@orders_bp.get("")
@require_auth
def list_orders_route():
    page = request.args.get("page", type=int)
    limit = request.args.get("limit", type=int)
    return api_response(order_service.list_all(page, limit), message="Orders retrieved")


@orders_bp.get("/<order_number>")
@require_auth
def get_order_route(order_number: str):
    return api_response(order_service.get_by_order_id(order_number), message="Order retrieved")
