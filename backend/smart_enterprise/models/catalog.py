from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z

STOCK_TYPES = ("PACKED", "UNPACKED")


class Product(db.Model):
    """
    Product master data.

    UNIQUENESS: (brand, model, product_type) is unique among *active*
    products. This is enforced by the catalog service rather than a DB
    constraint because inactive products may share the triple.

    DERIVED CACHE: available_stock is always SUM(stocks.stock) for this
    product. Only the stock ledger writes it.
    """
    __tablename__ = "products"
    __table_args__ = (
        db.Index("ix_products_triple", "brand", "model", "product_type"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    product_id = db.Column(db.String(32), nullable=False, unique=True)
    brand = db.Column(db.String(120), nullable=False)
    model = db.Column(db.String(120), nullable=False)
    product_type = db.Column(db.String(120), nullable=False)
    product_name = db.Column(db.String(255), nullable=False)
    status = db.Column(db.String(16), nullable=False, default="active")

    available_stock = db.Column(db.Integer, nullable=False, default=0)

    created_by = db.Column(db.String(32), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False)
    updated_at = db.Column(db.DateTime, nullable=False)

    def __repr__(self) -> str:
        return f"<Product {self.product_id} {self.brand!r}/{self.model!r}/{self.product_type!r}>"

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "brand": self.brand,
            "product_name": self.product_name,
            "model": self.model,
            "product_type": self.product_type,
            "status": self.status,
            "available_stock": self.available_stock,
            "created_by": self.created_by,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class Stock(db.Model):
    """
    Running stock total for one (product_id, stock_type) pair.

    This is an upsert-by-key row, not an event log: every ledger mutation
    updates stock and one cumulative counter in place and appends a line to
    stock_notes. Invariant: stock == add_stock - return_stock.
    """
    __tablename__ = "stocks"
    __table_args__ = (
        db.UniqueConstraint("product_id", "stock_type", name="uq_stocks_product_type"),
        db.CheckConstraint("stock >= 0", name="stock_not_negative"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    stock_id = db.Column(db.String(32), nullable=False, unique=True)
    product_id = db.Column(db.String(32), db.ForeignKey("products.product_id"), nullable=False, index=True)
    stock_type = db.Column(db.String(16), nullable=False)

    stock = db.Column(db.Integer, nullable=False, default=0)
    add_stock = db.Column(db.Integer, nullable=False, default=0)
    return_stock = db.Column(db.Integer, nullable=False, default=0)

    # Append-only audit text, one line per mutation
    stock_notes = db.Column(db.Text, nullable=False, default="")

    created_by = db.Column(db.String(32), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False)
    updated_at = db.Column(db.DateTime, nullable=False)

    product = db.relationship("Product", backref=db.backref("stocks", lazy=True))

    def __repr__(self) -> str:
        return f"<Stock {self.product_id}/{self.stock_type} stock={self.stock}>"

    def to_dict(self) -> dict:
        return {
            "stock_id": self.stock_id,
            "product_id": self.product_id,
            "stock_type": self.stock_type,
            "stock": self.stock,
            "add_stock": self.add_stock,
            "return_stock": self.return_stock,
            "stock_notes": self.stock_notes,
            "created_by": self.created_by,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
