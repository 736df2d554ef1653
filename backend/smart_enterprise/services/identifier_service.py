# Overview: Generation of prefixed public identifiers (EMP-, PRD-, STK-, ORD-, ODT-).

"""
Identifier Service

Public identifiers are a fixed prefix plus random uppercase alphanumerics,
e.g. "PRD-7K2M9QXA4B". They are what clients see and what rows reference
each other by; integer primary keys stay internal.

UNIQUENESS: Each identifier column carries a unique constraint. generate_unique()
checks for a collision before handing out a value, and the constraint is the
final backstop.
"""

from __future__ import annotations

import secrets
import string

from ..extensions import db

ALPHABET = string.ascii_uppercase + string.digits
CODE_LENGTH = 10
MAX_ATTEMPTS = 5

EMPLOYEE_PREFIX = "EMP"
PRODUCT_PREFIX = "PRD"
STOCK_PREFIX = "STK"
ORDER_PREFIX = "ORD"
ORDER_DETAIL_PREFIX = "ODT"


def generate_code(prefix: str, length: int = CODE_LENGTH) -> str:
    suffix = "".join(secrets.choice(ALPHABET) for _ in range(length))
    return f"{prefix}-{suffix}"


def generate_unique(column, prefix: str) -> str:
    """
    Generate a code not yet present in `column` (an InstrumentedAttribute,
    e.g. Product.product_id).
    """
    for _ in range(MAX_ATTEMPTS):
        code = generate_code(prefix)
        exists = db.session.query(column).filter(column == code).first()
        if exists is None:
            return code
    raise RuntimeError(f"Could not generate a unique {prefix} identifier")
