# Overview: Stock ledger: ADD/RETURN mutations per (product, stock_type) and the available_stock total.

"""
Stock Ledger Service

WHY: Stock totals are shared mutable state that many employees change at the
same time. Every mutation must land exactly once and Product.available_stock
must always equal the sum of its stock rows.

MODEL: One Stock row per (product_id, stock_type), created on the first ADD.
Each row holds the running `stock` and two cumulative counters:

    ADD q     -> stock += q, add_stock += q
    RETURN q  -> stock -= q, return_stock += q   (only while stock >= q)

so stock == add_stock - return_stock holds and stock never goes negative.

CONCURRENCY:
- The mutation is one conditional UPDATE evaluated by the database, so
  concurrent writers cannot lose each other's increments.
- The first ADD for a key INSERTs. Two racing first inserts collide on the
  (product_id, stock_type) unique constraint; the loser rolls back and
  retries through the UPDATE path.
- available_stock is rewritten from a fresh SUM(stock) in the same
  transaction, never incremented.

BATCH: apply_batch() commits entry by entry. A failure stops that product's
remaining entries only; nothing already committed is rolled back.
"""

from __future__ import annotations

import logging

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError

from ..errors import AppError, BadRequestError, NotFoundError, field_error
from ..extensions import db
from ..models import Order, Product, Stock, STOCK_TYPES
from ..roles import authorize
from ..time_utils import to_utc_z, utcnow
from ..validation import coerce_positive_int, raise_if_errors, sanitize_text
from .concurrency import run_with_retry
from .identifier_service import STOCK_PREFIX, generate_unique

logger = logging.getLogger(__name__)

ADD = "ADD"
RETURN = "RETURN"
ACTIONS = (ADD, RETURN)

LEDGER_RETRY_ON = (OperationalError, StaleDataError, IntegrityError)
LEDGER_ATTEMPTS = 5


def _format_note(*, actor: str, role: str, action: str, quantity: int, stock_type: str,
                 order_number: str | None, notes: str | None, at) -> str:
    note = f"[{to_utc_z(at)}] {action} {quantity} {stock_type} by {actor} ({role})"
    if order_number:
        note += f" order={order_number}"
    if notes:
        note += f": {notes}"
    return note


def _validate(stock_type, action, quantity) -> tuple[str, str, int]:
    errors = []
    action = action.strip().upper() if isinstance(action, str) else action
    if action not in ACTIONS:
        errors.append(field_error("action", f"action must be one of: {', '.join(ACTIONS)}"))

    stock_type = stock_type.strip().upper() if isinstance(stock_type, str) else stock_type
    if stock_type not in STOCK_TYPES:
        errors.append(field_error("stock_type", f"stock_type must be one of: {', '.join(STOCK_TYPES)}"))

    qty = None
    try:
        qty = coerce_positive_int(quantity)
    except ValueError as exc:
        errors.append(field_error("quantity", f"quantity {exc}"))

    raise_if_errors(errors)
    return stock_type, action, qty


def _mutate(product_id: str, stock_type: str, action: str, quantity: int, note: str, actor: str) -> None:
    """One attempt: conditional UPDATE, INSERT on first ADD, recompute total, commit."""
    now = utcnow()

    values = {
        "stock": Stock.stock + quantity if action == ADD else Stock.stock - quantity,
        "stock_notes": Stock.stock_notes + "\n" + note,
        "updated_at": now,
    }
    if action == ADD:
        values["add_stock"] = Stock.add_stock + quantity
    else:
        values["return_stock"] = Stock.return_stock + quantity

    stmt = update(Stock).where(Stock.product_id == product_id, Stock.stock_type == stock_type)
    if action == RETURN:
        stmt = stmt.where(Stock.stock >= quantity)
    stmt = stmt.values(**values).execution_options(synchronize_session=False)

    result = db.session.execute(stmt)

    if result.rowcount == 0:
        if action == RETURN:
            db.session.rollback()
            raise BadRequestError(
                f"Insufficient stock for {product_id} ({stock_type}) to return {quantity}"
            )
        db.session.add(Stock(
            stock_id=generate_unique(Stock.stock_id, STOCK_PREFIX),
            product_id=product_id,
            stock_type=stock_type,
            stock=quantity,
            add_stock=quantity,
            return_stock=0,
            stock_notes=note,
            created_by=actor,
            created_at=now,
            updated_at=now,
        ))
        # Surfaces a lost first-insert race as IntegrityError inside the retry loop
        db.session.flush()

    total = (
        select(func.coalesce(func.sum(Stock.stock), 0))
        .where(Stock.product_id == product_id)
        .scalar_subquery()
    )
    db.session.execute(
        update(Product)
        .where(Product.product_id == product_id)
        .values(available_stock=total, updated_at=now)
        .execution_options(synchronize_session=False)
    )
    db.session.commit()


def _stocks_for(product_id: str) -> list[Stock]:
    return (
        db.session.query(Stock)
        .filter(Stock.product_id == product_id)
        .order_by(Stock.stock_type.asc())
        .all()
    )


def apply(product_id: str, stock_type: str, action: str, quantity, notes: str | None = None,
          order_number: str | None = None) -> dict:
    """
    Apply one ADD or RETURN to the (product_id, stock_type) row.

    Returns {stocks: [...all rows of the product], stock: mutated row, product}.

    Raises:
        ValidationError: bad action, stock_type or quantity
        BadRequestError: RETURN without a known order, unknown product,
            or a RETURN larger than the current stock
        UnauthorizedError: caller role may not change stock
    """
    ctx = authorize("stock.apply")
    stock_type, action, quantity = _validate(stock_type, action, quantity)

    if action == RETURN:
        if not order_number:
            raise BadRequestError("order_number is required for RETURN")
        exists = db.session.query(Order.id).filter(Order.order_number == order_number).first()
        if exists is None:
            raise BadRequestError(f"Order {order_number} not found")

    product_exists = db.session.query(Product.id).filter(Product.product_id == product_id).first()
    if product_exists is None:
        raise BadRequestError(f"Product {product_id} not found")

    note = _format_note(
        actor=ctx.employee_id,
        role=ctx.role,
        action=action,
        quantity=quantity,
        stock_type=stock_type,
        order_number=order_number,
        notes=sanitize_text(notes) if notes else None,
        at=utcnow(),
    )

    run_with_retry(
        lambda: _mutate(product_id, stock_type, action, quantity, note, ctx.employee_id),
        attempts=LEDGER_ATTEMPTS,
        retry_on=LEDGER_RETRY_ON,
    )

    stocks = _stocks_for(product_id)
    row = next(s for s in stocks if s.stock_type == stock_type)
    product = db.session.query(Product).filter(Product.product_id == product_id).one()
    logger.info(
        "Stock %s %d %s on %s by %s -> stock=%d available=%d",
        action, quantity, stock_type, product_id, ctx.employee_id, row.stock, product.available_stock,
    )
    return {
        "stocks": [s.to_dict() for s in stocks],
        "stock": row.to_dict(),
        "product": product.to_dict(),
    }


def apply_batch(stock_map: dict) -> list[dict]:
    """
    Apply {product_id: [entry, ...]} where each entry is
    {stock_type, action (default ADD), quantity, notes?, order_number?}.

    Each entry commits on its own. The first failing entry stops the rest of
    that product's list; other products still run. Returns one result per
    product with success, applied (count of committed entries) and either
    the final stocks/product or the error.
    """
    authorize("stock.apply")
    if not isinstance(stock_map, dict) or not stock_map:
        raise BadRequestError("Stock map must be a non-empty object keyed by product_id")

    results = []
    for product_id, entries in stock_map.items():
        if isinstance(entries, dict):
            entries = [entries]
        applied = 0
        last = None
        try:
            if not isinstance(entries, list) or not entries:
                raise BadRequestError(f"No stock entries given for {product_id}")
            for entry in entries:
                if not isinstance(entry, dict):
                    raise BadRequestError("Each stock entry must be an object")
                last = apply(
                    product_id,
                    entry.get("stock_type"),
                    entry.get("action", ADD),
                    entry.get("quantity"),
                    entry.get("notes"),
                    entry.get("order_number"),
                )
                applied += 1
        except AppError as err:
            logger.warning("Batch stock for %s stopped after %d entries: %s", product_id, applied, err.message)
            results.append({
                "product_id": product_id,
                "success": False,
                "applied": applied,
                "error": {"name": type(err).__name__, "message": err.message, "errors": err.errors},
            })
            continue
        except SQLAlchemyError:
            db.session.rollback()
            logger.exception("Batch stock for %s failed in the database after %d entries", product_id, applied)
            results.append({
                "product_id": product_id,
                "success": False,
                "applied": applied,
                "error": {"name": "InternalError", "message": "Stock update failed", "errors": []},
            })
            continue

        results.append({
            "product_id": product_id,
            "success": True,
            "applied": applied,
            "stocks": last["stocks"],
            "product": last["product"],
        })
    return results


def list_for_product(product_id: str) -> list[dict]:
    authorize("stock.read")
    exists = db.session.query(Product.id).filter(Product.product_id == product_id).first()
    if exists is None:
        raise NotFoundError(f"Product {product_id} not found")
    return [s.to_dict() for s in _stocks_for(product_id)]
