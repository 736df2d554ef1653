from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z


class Employee(db.Model):
    """
    Employee accounts for authentication and attribution.

    Dealers are employees too (role ROLE_DEALER); orders reference them by
    employee_id. Employees are never hard-deleted: deactivation flips status
    to "inactive" and removes them from logins and listings.
    """
    __tablename__ = "employees"
    __table_args__ = (
        db.Index("ix_employees_status_created", "status", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    employee_id = db.Column(db.String(32), nullable=False, unique=True)
    employee_name = db.Column(db.String(150), nullable=False)
    employee_email = db.Column(db.String(255), nullable=False, unique=True)
    employee_phone = db.Column(db.String(20), nullable=False, unique=True)

    # Bcrypt hashed password; never serialized
    password_hash = db.Column(db.String(255), nullable=False)

    role = db.Column(db.String(32), nullable=False, index=True)
    status = db.Column(db.String(16), nullable=False, default="active")
    created_by = db.Column(db.String(32), nullable=False)

    shop_name = db.Column(db.String(255), nullable=True)
    district = db.Column(db.String(120), nullable=True)
    town = db.Column(db.String(120), nullable=True)
    brand = db.Column(db.String(120), nullable=True)
    address = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime, nullable=False)
    updated_at = db.Column(db.DateTime, nullable=False)

    def __repr__(self) -> str:
        return f"<Employee {self.employee_id} role={self.role} status={self.status}>"

    def to_dict(self) -> dict:
        return {
            "employee_id": self.employee_id,
            "employee_name": self.employee_name,
            "employee_email": self.employee_email,
            "employee_phone": self.employee_phone,
            "role": self.role,
            "status": self.status,
            "created_by": self.created_by,
            "shop_name": self.shop_name,
            "district": self.district,
            "town": self.town,
            "brand": self.brand,
            "address": self.address,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }

    def to_summary(self) -> dict:
        """Compact view embedded in order responses."""
        return {
            "employee_id": self.employee_id,
            "employee_name": self.employee_name,
            "employee_email": self.employee_email,
            "employee_phone": self.employee_phone,
            "shop_name": self.shop_name,
            "town": self.town,
            "district": self.district,
        }
