# backend/smart_enterprise/services/products_service.py
"""
Products Service

RULES:
- Only admins (ROLE_ADMIN, ROLE_SUPER_ADMIN) create or update products
- (brand, model, product_type) is unique among active products. The check
  is a read before the insert with no DB constraint behind it, so it is
  best-effort under concurrent creates
- available_stock is owned by the stock ledger and never written from
  client input; an optional `stock` list on create is applied as ADD
  mutations once the product exists

SEEDING: Initial stock entries run after the product commits, one ledger
commit each. A failing entry stops seeding and is reported back with the
created product; stock committed before the failure stays.
"""
from __future__ import annotations

import logging

from ..errors import AppError, BadRequestError, ConflictError, NotFoundError, field_error
from ..extensions import db
from ..models import Product
from ..roles import ACTIVE_STATUS, INACTIVE_STATUS, authorize
from ..time_utils import stamp
from ..validation import raise_if_errors, require_fields, sanitize_text
from . import stock_service
from .identifier_service import PRODUCT_PREFIX, generate_unique

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("brand", "model", "product_type", "product_name")
PRODUCT_MUTABLE_FIELDS = ("brand", "model", "product_type", "product_name", "status")
TRIPLE = ("brand", "model", "product_type")
STATUSES = (ACTIVE_STATUS, INACTIVE_STATUS)


def _find_triple(brand: str, model: str, product_type: str, exclude_product_id: str | None = None):
    q = db.session.query(Product).filter(
        Product.brand == brand,
        Product.model == model,
        Product.product_type == product_type,
        Product.status == ACTIVE_STATUS,
    )
    if exclude_product_id is not None:
        q = q.filter(Product.product_id != exclude_product_id)
    return q.first()


def _triple_conflict(brand: str, model: str, product_type: str) -> ConflictError:
    return ConflictError(
        f'A product with brand "{brand}", model "{model}", and type "{product_type}" already exists.'
    )


def _seed_stock(product_id: str, entries) -> tuple[dict | None, list[dict]]:
    """Apply initial stock as ADD mutations. Returns (last ledger result, errors)."""
    if not isinstance(entries, list):
        return None, [{"message": "stock must be a list of {stock_type, quantity, notes}"}]

    last = None
    for index, entry in enumerate(entries):
        if not isinstance(entry, dict):
            return last, [{"index": index, "message": "Each stock entry must be an object"}]
        try:
            last = stock_service.apply(
                product_id,
                entry.get("stock_type"),
                stock_service.ADD,
                entry.get("quantity"),
                entry.get("notes") or "Initial stock",
            )
        except AppError as err:
            logger.warning("Initial stock for %s stopped at entry %d: %s", product_id, index, err.message)
            return last, [{"index": index, "message": err.message, "errors": err.errors}]
    return last, []


def create_product(dto: dict) -> dict:
    """
    Create a product, then seed any initial stock.

    Returns {product, stocks, stock_errors}.
    """
    ctx = authorize("product.create")
    raise_if_errors(require_fields(dto, REQUIRED_FIELDS))

    brand = sanitize_text(dto["brand"])
    model = sanitize_text(dto["model"])
    product_type = sanitize_text(dto["product_type"])
    product_name = sanitize_text(dto["product_name"])

    if _find_triple(brand, model, product_type) is not None:
        raise _triple_conflict(brand, model, product_type)

    product = Product(
        product_id=generate_unique(Product.product_id, PRODUCT_PREFIX),
        brand=brand,
        model=model,
        product_type=product_type,
        product_name=product_name,
        status=ACTIVE_STATUS,
        available_stock=0,
        created_by=ctx.employee_id,
    )
    stamp(product, created=True)
    db.session.add(product)
    db.session.commit()
    logger.info("Product created: %s by %s", product.product_id, ctx.employee_id)

    stocks: list[dict] = []
    stock_errors: list[dict] = []
    if dto.get("stock"):
        last, stock_errors = _seed_stock(product.product_id, dto["stock"])
        if last is not None:
            stocks = last["stocks"]

    db.session.refresh(product)
    return {"product": product.to_dict(), "stocks": stocks, "stock_errors": stock_errors}


def update_product(product_id: str, patch: dict) -> Product:
    """
    Apply a partial update to brand, model, product_type, product_name or status.

    The uniqueness triple is re-checked only when all three of its fields
    are in the patch.
    """
    ctx = authorize("product.update")

    product = db.session.query(Product).filter(Product.product_id == product_id).one_or_none()
    if product is None:
        raise NotFoundError(f"No product found with this product ID {product_id}")

    clean = {k: sanitize_text(patch[k]) for k in PRODUCT_MUTABLE_FIELDS if patch.get(k) is not None}
    if not clean:
        raise BadRequestError("No valid fields provided for update.")

    errors = [field_error(k, f"{k} cannot be empty") for k, v in clean.items() if not v]
    if "status" in clean and clean["status"] not in STATUSES:
        errors.append(field_error("status", f"status must be one of: {', '.join(STATUSES)}"))
    raise_if_errors(errors)

    if all(k in clean for k in TRIPLE):
        if _find_triple(clean["brand"], clean["model"], clean["product_type"], exclude_product_id=product_id):
            raise _triple_conflict(clean["brand"], clean["model"], clean["product_type"])

    for key, value in clean.items():
        setattr(product, key, value)
    stamp(product)
    db.session.commit()
    logger.info("Product updated: %s by %s", product_id, ctx.employee_id)
    return product


def get_product(product_id: str) -> Product:
    authorize("product.read")
    product = db.session.query(Product).filter(Product.product_id == product_id).one_or_none()
    if product is None:
        raise NotFoundError(f"No product found with this product ID {product_id}")
    return product


def list_products(status: str | None = None) -> list[Product]:
    """All products, newest first, optionally filtered by status."""
    authorize("product.read")
    q = db.session.query(Product)
    if status:
        q = q.filter(Product.status == status)
    return q.order_by(Product.created_at.desc(), Product.id.desc()).all()
