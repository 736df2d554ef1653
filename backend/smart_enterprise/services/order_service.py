# Overview: Dealer orders: placement with product snapshots, lookup and paged listing.

"""
Order Service

An order belongs to a dealer (an active employee with ROLE_DEALER) and holds
one OrderDetails line per product. Each line copies the product's brand,
name, model and type at placement time.

ATOMICITY: The header and all lines are added to the session and committed
once; any failure before the commit leaves nothing behind.

Placing an order does not move stock. Stock changes go through the stock
ledger (a RETURN references an existing order_number).
"""

from __future__ import annotations

import logging
import math

from ..errors import BadRequestError, NotFoundError, field_error
from ..extensions import db
from ..models import Employee, Order, OrderDetails, Product, ORDER_PRIORITIES
from ..roles import ACTIVE_STATUS, Role, authorize
from ..time_utils import parse_iso_datetime, stamp
from ..validation import coerce_positive_int, raise_if_errors, sanitize_text
from .identifier_service import ORDER_DETAIL_PREFIX, ORDER_PREFIX, generate_unique

logger = logging.getLogger(__name__)

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100


def _validate(dto: dict) -> tuple[str, list[dict]]:
    """
    Check header and line fields.

    Returns (priority, lines) where each line is
    {product_id, qty_ordered:int, delivery_date:datetime}.
    Raises one ValidationError listing every problem.
    """
    errors = []

    dealer_id = dto.get("dealer_id")
    if not isinstance(dealer_id, str) or not dealer_id.strip():
        errors.append(field_error("dealer_id", "dealer_id is required"))

    priority = dto.get("priority")
    priority = priority.strip().upper() if isinstance(priority, str) else priority
    if not priority:
        errors.append(field_error("priority", "priority is required"))
    elif priority not in ORDER_PRIORITIES:
        errors.append(field_error("priority", f"priority must be one of: {', '.join(ORDER_PRIORITIES)}"))

    details = dto.get("order_details")
    lines = []
    if not isinstance(details, list) or not details:
        errors.append(field_error("order_details", "order_details must be a non-empty list"))
        details = []

    for i, item in enumerate(details):
        prefix = f"order_details[{i}]"
        if not isinstance(item, dict):
            errors.append(field_error(prefix, "must be an object"))
            continue

        product_id = item.get("product_id")
        if not isinstance(product_id, str) or not product_id.strip():
            errors.append(field_error(f"{prefix}.product_id", "product_id is required"))

        qty = None
        try:
            qty = coerce_positive_int(item.get("qty_ordered"))
        except ValueError as exc:
            errors.append(field_error(f"{prefix}.qty_ordered", f"qty_ordered {exc}"))

        try:
            delivery = parse_iso_datetime(item.get("delivery_date"))
        except ValueError:
            delivery = None
        if delivery is None:
            errors.append(field_error(f"{prefix}.delivery_date", "delivery_date must be an ISO-8601 date"))

        lines.append({"product_id": product_id, "qty_ordered": qty, "delivery_date": delivery})

    raise_if_errors(errors, "Order validation failed")
    return priority, lines


def create_order(dto: dict) -> dict:
    """
    Place an order for a dealer.

    Returns {order, dealer, order_details}.

    Raises:
        ValidationError: malformed header or lines
        BadRequestError: dealer is not an active ROLE_DEALER, or a product is unknown
        UnauthorizedError: caller role may not place orders
    """
    ctx = authorize("order.create")
    priority, lines = _validate(dto)
    dealer_id = dto["dealer_id"].strip()

    dealer = (
        db.session.query(Employee)
        .filter(Employee.employee_id == dealer_id, Employee.status == ACTIVE_STATUS)
        .one_or_none()
    )
    if dealer is None or dealer.role != Role.DEALER.value:
        raise BadRequestError(f"Dealer {dealer_id} not found or is not an active dealer")

    product_ids = {line["product_id"] for line in lines}
    products = {
        p.product_id: p
        for p in db.session.query(Product).filter(Product.product_id.in_(product_ids)).all()
    }
    missing = sorted(product_ids - products.keys())
    if missing:
        raise BadRequestError(f"Product not found: {', '.join(missing)}")

    order = Order(
        order_number=generate_unique(Order.order_number, ORDER_PREFIX),
        dealer_id=dealer.employee_id,
        created_by=ctx.employee_id,
        priority=priority,
        order_note=sanitize_text(dto.get("order_note")) or "",
        status="PENDING",
        delivery_date=min(line["delivery_date"] for line in lines),
    )
    now = stamp(order, created=True)
    db.session.add(order)

    details = []
    for line in lines:
        product = products[line["product_id"]]
        detail = OrderDetails(
            order_details_number=generate_unique(OrderDetails.order_details_number, ORDER_DETAIL_PREFIX),
            order_number=order.order_number,
            product_id=product.product_id,
            product_brand=product.brand,
            product_name=product.product_name,
            product_model=product.model,
            product_type=product.product_type,
            qty_ordered=line["qty_ordered"],
            qty_delivered=0,
            delivery_date=line["delivery_date"],
            status="PENDING",
            created_at=now,
            updated_at=now,
        )
        db.session.add(detail)
        details.append(detail)

    try:
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    logger.info(
        "Order %s placed by %s for dealer %s with %d lines",
        order.order_number, ctx.employee_id, dealer.employee_id, len(details),
    )
    return {
        "order": order.to_dict(),
        "dealer": dealer.to_summary(),
        "order_details": [d.to_dict() for d in details],
    }


def get_by_order_id(order_number: str) -> dict:
    authorize("order.read")
    row = (
        db.session.query(Order, Employee)
        .outerjoin(Employee, Employee.employee_id == Order.dealer_id)
        .filter(Order.order_number == order_number)
        .one_or_none()
    )
    if row is None:
        raise NotFoundError(f"Order {order_number} not found")
    order, dealer = row

    details = (
        db.session.query(OrderDetails)
        .filter(OrderDetails.order_number == order_number)
        .order_by(OrderDetails.id.asc())
        .all()
    )
    return {
        "order": order.to_dict(),
        "dealer": dealer.to_summary() if dealer else None,
        "order_details": [d.to_dict() for d in details],
    }


def list_all(page: int | None = None, limit: int | None = None) -> dict:
    """
    Page through orders, newest first.

    Three queries regardless of page size: orders, their dealers, their lines.
    """
    authorize("order.read")
    page = page if page and page > 0 else DEFAULT_PAGE
    limit = min(limit if limit and limit > 0 else DEFAULT_LIMIT, MAX_LIMIT)

    base = db.session.query(Order)
    total = base.count()
    orders = (
        base.order_by(Order.created_at.desc(), Order.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )

    dealer_ids = {o.dealer_id for o in orders}
    order_numbers = [o.order_number for o in orders]

    dealers = {}
    if dealer_ids:
        dealers = {
            e.employee_id: e
            for e in db.session.query(Employee).filter(Employee.employee_id.in_(dealer_ids)).all()
        }

    lines_by_order: dict[str, list] = {n: [] for n in order_numbers}
    if order_numbers:
        for d in (
            db.session.query(OrderDetails)
            .filter(OrderDetails.order_number.in_(order_numbers))
            .order_by(OrderDetails.id.asc())
            .all()
        ):
            lines_by_order[d.order_number].append(d.to_dict())

    items = []
    for o in orders:
        dealer = dealers.get(o.dealer_id)
        items.append({
            "order": o.to_dict(),
            "dealer": dealer.to_summary() if dealer else None,
            "order_details": lines_by_order[o.order_number],
        })

    return {
        "orders": items,
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "pages": math.ceil(total / limit) if total else 0,
        },
    }
