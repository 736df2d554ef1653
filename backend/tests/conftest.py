"""
Pytest fixtures for Smart Enterprise backend tests.

Provides an in-memory application, per-test table cleanup, one employee per
role, and helpers for bearer headers and service-level caller identity.
"""

import itertools

import pytest

from smart_enterprise import create_app
from smart_enterprise.extensions import db
from smart_enterprise.models import Employee, Order, Product
from smart_enterprise.request_context import bound_context
from smart_enterprise.roles import ACTIVE_STATUS, Role
from smart_enterprise.services import token_service
from smart_enterprise.services.auth_service import hash_password
from smart_enterprise.time_utils import stamp

PASSWORD = "Str0ng@Pass"

TEST_CONFIG = {
    'TESTING': True,
    'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
    'SQLALCHEMY_TRACK_MODIFICATIONS': False,
    'JWT_SECRET_KEY': 'test-jwt-secret-key-with-enough-bytes-0123456789',
    'BCRYPT_ROUNDS': 4,
    'RATELIMIT_ENABLED': False,
    'TOKEN_BLACKLIST_SWEEPER_ENABLED': False,
    'LOG_LEVEL': 'WARNING',
}

_sequence = itertools.count(1)


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app(dict(TEST_CONFIG))

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function', autouse=True)
def db_session(app):
    """Fresh tables, limiters and blacklist for each test."""
    with app.app_context():
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        for limiter in app.extensions["rate_limiters"].values():
            limiter.reset()
        app.extensions["token_blacklist"].clear()

        yield db.session

        db.session.rollback()


@pytest.fixture
def make_employee(db_session):
    """Factory: insert an employee row directly, bypassing the service."""
    def _make(role=Role.ADMIN, *, status=ACTIVE_STATUS, email=None, phone=None, name=None, password=PASSWORD):
        n = next(_sequence)
        role_value = Role.parse(role).value
        employee = Employee(
            employee_id=f"EMP-TEST{n:06d}",
            employee_name=name or f"{role_value.title()} {n}",
            employee_email=email or f"user{n}@example.com",
            employee_phone=phone or f"07{n:08d}",
            password_hash=hash_password(password),
            role=role_value,
            status=status,
            created_by="EMP-SYSTEM",
        )
        stamp(employee, created=True)
        db_session.add(employee)
        db_session.commit()
        return employee
    return _make


@pytest.fixture
def super_admin(make_employee):
    return make_employee(Role.SUPER_ADMIN)


@pytest.fixture
def admin(make_employee):
    return make_employee(Role.ADMIN)


@pytest.fixture
def manager(make_employee):
    return make_employee(Role.MANAGER)


@pytest.fixture
def supervisor(make_employee):
    return make_employee(Role.SUPERVISOR)


@pytest.fixture
def salesman(make_employee):
    return make_employee(Role.SALESMAN)


@pytest.fixture
def dealer(make_employee):
    return make_employee(Role.DEALER)


@pytest.fixture
def make_product(db_session):
    """Factory: insert a product row with zero stock."""
    def _make(brand="Acme", model="M1", product_type="Tile", product_name="Acme M1 Tile", status=ACTIVE_STATUS):
        n = next(_sequence)
        product = Product(
            product_id=f"PRD-TEST{n:06d}",
            brand=brand,
            model=model,
            product_type=product_type,
            product_name=product_name,
            status=status,
            available_stock=0,
            created_by="EMP-SYSTEM",
        )
        stamp(product, created=True)
        db_session.add(product)
        db_session.commit()
        return product
    return _make


@pytest.fixture
def make_order(db_session):
    """Factory: insert a bare order header (used as a RETURN reference)."""
    def _make(dealer_id):
        n = next(_sequence)
        order = Order(
            order_number=f"ORD-TEST{n:06d}",
            dealer_id=dealer_id,
            created_by="EMP-SYSTEM",
            priority="LOW",
            order_note="",
            status="PENDING",
        )
        stamp(order, created=True)
        db_session.add(order)
        db_session.commit()
        return order
    return _make


def token_for(employee, **kwargs) -> str:
    token, _ = token_service.sign(employee.employee_id, employee.role, employee.status, **kwargs)
    return token


def auth_headers(employee_or_token) -> dict:
    """Helper to create Authorization headers."""
    token = employee_or_token if isinstance(employee_or_token, str) else token_for(employee_or_token)
    return {'Authorization': f'Bearer {token}'}


def acting_as(employee):
    """Bind `employee` as the caller for direct service calls."""
    return bound_context(employee_id=employee.employee_id, role=employee.role, status=employee.status)
