# Overview: Product catalog and stock ledger endpoints.

from flask import Blueprint, request

from ..decorators import require_auth
from ..errors import BadRequestError
from ..responses import api_response
from ..services import products_service, stock_service
from ..validation import require_json_object

products_bp = Blueprint("products", __name__, url_prefix="/api/v1/products")


@products_bp.post("/create")
@require_auth
def create_product_route():
    data = require_json_object(request.get_json(silent=True))
    result = products_service.create_product(data)
    message = "Product created successfully"
    if result["stock_errors"]:
        message = "Product created; some initial stock entries failed"
    return api_response(result, message=message, status=201)


@products_bp.get("")
@require_auth
def list_products_route():
    status = request.args.get("status") or None
    products = products_service.list_products(status=status)
    return api_response([p.to_dict() for p in products], message="Products retrieved")


@products_bp.get("/<product_id>")
@require_auth
def get_product_route(product_id: str):
    product = products_service.get_product(product_id)
    return api_response(product.to_dict(), message="Product retrieved")


@products_bp.put("/<product_id>")
@require_auth
def update_product_route(product_id: str):
    data = require_json_object(request.get_json(silent=True))
    product = products_service.update_product(product_id, data)
    return api_response(product.to_dict(), message="Product updated successfully")


@products_bp.get("/<product_id>/stock")
@require_auth
def list_stock_route(product_id: str):
    return api_response(stock_service.list_for_product(product_id), message="Stock retrieved")


@products_bp.post("/<product_id>/stock")
@require_auth
def apply_stock_route(product_id: str):
    """
    Body: {stock_type, action: ADD|RETURN, quantity, notes?, order_number?}
    """
    data = require_json_object(request.get_json(silent=True))
    result = stock_service.apply(
        product_id,
        data.get("stock_type"),
        data.get("action"),
        data.get("quantity"),
        data.get("notes"),
        data.get("order_number"),
    )
    return api_response(result, message="Stock updated successfully")


@products_bp.post("/stock/batch")
@require_auth
def apply_stock_batch_route():
    """
    Body: {product_id: [{stock_type, action, quantity, notes?, order_number?}, ...], ...}

    Per-product pass/fail; 207 when some products failed.
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict) or not data:
        raise BadRequestError("Stock map must be a non-empty object keyed by product_id")
    results = stock_service.apply_batch(data)
    failed = sum(1 for r in results if not r["success"])
    if failed:
        return api_response(results, message=f"{failed} of {len(results)} products failed", status=207)
    return api_response(results, message="Stock batch applied")
