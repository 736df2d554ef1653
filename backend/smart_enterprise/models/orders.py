from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z

ORDER_PRIORITIES = ("LOW", "MEDIUM", "HIGH")


class Order(db.Model):
    """Dealer order header. Lines live in OrderDetails keyed by order_number."""
    __tablename__ = "orders"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)

    order_number = db.Column(db.String(32), nullable=False, unique=True)
    dealer_id = db.Column(db.String(32), db.ForeignKey("employees.employee_id"), nullable=False, index=True)
    created_by = db.Column(db.String(32), nullable=False)
    priority = db.Column(db.String(16), nullable=False, default="LOW")
    order_note = db.Column(db.Text, nullable=False, default="")
    status = db.Column(db.String(16), nullable=False, default="PENDING")
    delivery_date = db.Column(db.DateTime, nullable=True)

    created_at = db.Column(db.DateTime, nullable=False)
    updated_at = db.Column(db.DateTime, nullable=False)

    def __repr__(self) -> str:
        return f"<Order {self.order_number} dealer={self.dealer_id} status={self.status}>"

    def to_dict(self) -> dict:
        return {
            "order_number": self.order_number,
            "dealer_id": self.dealer_id,
            "created_by": self.created_by,
            "priority": self.priority,
            "order_note": self.order_note,
            "status": self.status,
            "delivery_date": to_utc_z(self.delivery_date),
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class OrderDetails(db.Model):
    """
    One order line.

    Product descriptor fields are a snapshot taken when the order is placed;
    later catalog edits do not rewrite historical lines.
    """
    __tablename__ = "order_details"
    __table_args__ = (
        db.CheckConstraint("qty_ordered > 0", name="qty_ordered_positive"),
        db.CheckConstraint("qty_delivered >= 0", name="qty_delivered_not_negative"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    order_details_number = db.Column(db.String(32), nullable=False, unique=True)
    order_number = db.Column(db.String(32), db.ForeignKey("orders.order_number"), nullable=False, index=True)
    product_id = db.Column(db.String(32), db.ForeignKey("products.product_id"), nullable=False, index=True)

    product_brand = db.Column(db.String(120), nullable=False)
    product_name = db.Column(db.String(255), nullable=False)
    product_model = db.Column(db.String(120), nullable=False)
    product_type = db.Column(db.String(120), nullable=False)

    qty_ordered = db.Column(db.Integer, nullable=False)
    qty_delivered = db.Column(db.Integer, nullable=False, default=0)
    delivery_date = db.Column(db.DateTime, nullable=False)
    status = db.Column(db.String(16), nullable=False, default="PENDING")

    created_at = db.Column(db.DateTime, nullable=False)
    updated_at = db.Column(db.DateTime, nullable=False)

    def to_dict(self) -> dict:
        return {
            "order_details_number": self.order_details_number,
            "order_number": self.order_number,
            "product_id": self.product_id,
            "product_brand": self.product_brand,
            "product_name": self.product_name,
            "product_model": self.product_model,
            "product_type": self.product_type,
            "qty_ordered": self.qty_ordered,
            "qty_delivered": self.qty_delivered,
            "delivery_date": to_utc_z(self.delivery_date),
            "status": self.status,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
