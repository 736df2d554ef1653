"""
Order workbook tests.

Verifies:
- Orders need an active ROLE_DEALER and existing products
- Line validation errors carry indexed field names
- Product descriptors are snapshotted onto each line
- Header and lines persist together or not at all
- Listing batches dealers and lines per page
"""

import pytest

from smart_enterprise.errors import BadRequestError, NotFoundError, UnauthorizedError, ValidationError
from smart_enterprise.models import Order, OrderDetails
from smart_enterprise.roles import INACTIVE_STATUS, Role
from smart_enterprise.services import order_service, products_service

from conftest import acting_as, auth_headers


def order_payload(dealer_id, *product_ids, qty=2, delivery_date="2026-11-01T09:00:00Z", **overrides):
    payload = {
        "dealer_id": dealer_id,
        "priority": "HIGH",
        "order_note": "Deliver before noon",
        "order_details": [
            {"product_id": pid, "qty_ordered": qty, "delivery_date": delivery_date} for pid in product_ids
        ],
    }
    payload.update(overrides)
    return payload


class TestCreateOrder:

    def test_salesman_places_order(self, salesman, dealer, make_product):
        p1 = make_product(brand="Acme", model="A1", product_type="Tile", product_name="Acme A1")
        p2 = make_product(brand="Acme", model="A2", product_type="Tile", product_name="Acme A2")

        with acting_as(salesman):
            result = order_service.create_order(order_payload(dealer.employee_id, p1.product_id, p2.product_id))

        order = result["order"]
        assert order["order_number"].startswith("ORD-")
        assert order["status"] == "PENDING"
        assert order["priority"] == "HIGH"
        assert order["created_by"] == salesman.employee_id
        assert result["dealer"]["employee_id"] == dealer.employee_id

        lines = result["order_details"]
        assert len(lines) == 2
        assert all(line["order_details_number"].startswith("ODT-") for line in lines)
        assert lines[0]["product_model"] == "A1"
        assert lines[0]["qty_delivered"] == 0
        assert lines[0]["delivery_date"] == "2026-11-01T09:00:00Z"

    @pytest.mark.parametrize("priority", [None, "", "   "])
    def test_priority_required(self, admin, dealer, make_product, db_session, priority):
        product = make_product()
        payload = order_payload(dealer.employee_id, product.product_id)
        if priority is None:
            del payload["priority"]
        else:
            payload["priority"] = priority
        with acting_as(admin), pytest.raises(ValidationError) as exc:
            order_service.create_order(payload)
        assert exc.value.errors == [{"field": "priority", "message": "priority is required"}]
        assert db_session.query(Order).count() == 0

    def test_unknown_priority(self, admin, dealer, make_product):
        product = make_product()
        payload = order_payload(dealer.employee_id, product.product_id)
        payload["priority"] = "URGENT"
        with acting_as(admin), pytest.raises(ValidationError) as exc:
            order_service.create_order(payload)
        assert [e["field"] for e in exc.value.errors] == ["priority"]

    @pytest.mark.parametrize("role", [Role.MANAGER, Role.SUPERVISOR, Role.DEALER])
    def test_role_denied(self, make_employee, dealer, make_product, role):
        product = make_product()
        with acting_as(make_employee(role)), pytest.raises(UnauthorizedError):
            order_service.create_order(order_payload(dealer.employee_id, product.product_id))

    def test_non_dealer_rejected(self, salesman, manager, make_product):
        product = make_product()
        with acting_as(salesman), pytest.raises(BadRequestError):
            order_service.create_order(order_payload(manager.employee_id, product.product_id))

    def test_inactive_dealer_rejected(self, salesman, make_employee, make_product):
        product = make_product()
        gone = make_employee(Role.DEALER, status=INACTIVE_STATUS)
        with acting_as(salesman), pytest.raises(BadRequestError):
            order_service.create_order(order_payload(gone.employee_id, product.product_id))

    @pytest.mark.parametrize("qty", [0, -3, "many", 2**31])
    def test_bad_quantity(self, salesman, dealer, make_product, qty):
        product = make_product()
        with acting_as(salesman), pytest.raises(ValidationError) as exc:
            order_service.create_order(order_payload(dealer.employee_id, product.product_id, qty=qty))
        assert [e["field"] for e in exc.value.errors] == ["order_details[0].qty_ordered"]

    def test_bad_delivery_date(self, salesman, dealer, make_product):
        product = make_product()
        with acting_as(salesman), pytest.raises(ValidationError) as exc:
            order_service.create_order(order_payload(dealer.employee_id, product.product_id, delivery_date="soon"))
        assert [e["field"] for e in exc.value.errors] == ["order_details[0].delivery_date"]

    def test_header_errors_collected(self, salesman):
        with acting_as(salesman), pytest.raises(ValidationError) as exc:
            order_service.create_order({"priority": "URGENT", "order_details": []})
        assert {e["field"] for e in exc.value.errors} == {"dealer_id", "priority", "order_details"}

    def test_unknown_product_persists_nothing(self, salesman, dealer, make_product, db_session):
        product = make_product()
        with acting_as(salesman), pytest.raises(BadRequestError):
            order_service.create_order(order_payload(dealer.employee_id, product.product_id, "PRD-MISSING"))
        assert db_session.query(Order).count() == 0
        assert db_session.query(OrderDetails).count() == 0

    def test_snapshot_survives_product_edit(self, admin, salesman, dealer, make_product):
        product = make_product(product_name="Original Name")
        with acting_as(salesman):
            placed = order_service.create_order(order_payload(dealer.employee_id, product.product_id))
        with acting_as(admin):
            products_service.update_product(product.product_id, {"product_name": "Renamed"})
        with acting_as(salesman):
            fetched = order_service.get_by_order_id(placed["order"]["order_number"])
        assert fetched["order_details"][0]["product_name"] == "Original Name"


class TestReadOrders:

    def test_get_by_order_id(self, salesman, dealer, make_product):
        product = make_product()
        with acting_as(salesman):
            placed = order_service.create_order(order_payload(dealer.employee_id, product.product_id))
            fetched = order_service.get_by_order_id(placed["order"]["order_number"])
        assert fetched["order"] == placed["order"]
        assert fetched["dealer"]["employee_id"] == dealer.employee_id
        assert len(fetched["order_details"]) == 1

    def test_missing_order(self, salesman):
        with acting_as(salesman), pytest.raises(NotFoundError):
            order_service.get_by_order_id("ORD-NOPE")

    def test_list_all(self, salesman, dealer, make_product):
        p1 = make_product(model="1")
        p2 = make_product(model="2")
        with acting_as(salesman):
            first = order_service.create_order(order_payload(dealer.employee_id, p1.product_id))
            second = order_service.create_order(order_payload(dealer.employee_id, p1.product_id, p2.product_id))
            page = order_service.list_all(page=1, limit=1)
            everything = order_service.list_all()

        assert page["pagination"] == {"page": 1, "limit": 1, "total": 2, "pages": 2}
        assert page["orders"][0]["order"]["order_number"] == second["order"]["order_number"]
        assert len(page["orders"][0]["order_details"]) == 2
        assert [o["order"]["order_number"] for o in everything["orders"]] == [
            second["order"]["order_number"],
            first["order"]["order_number"],
        ]
        assert everything["orders"][1]["dealer"]["employee_id"] == dealer.employee_id


class TestOrderRoutes:

    def test_create_get_list(self, client, salesman, dealer, make_product):
        product = make_product()
        headers = auth_headers(salesman)

        resp = client.post("/api/v1/orders", json=order_payload(dealer.employee_id, product.product_id), headers=headers)
        assert resp.status_code == 201
        order_number = resp.get_json()["data"]["order"]["order_number"]

        resp = client.get(f"/api/v1/orders/{order_number}", headers=headers)
        assert resp.status_code == 200
        assert resp.get_json()["data"]["order"]["order_number"] == order_number

        resp = client.get("/api/v1/orders?page=1&limit=10", headers=headers)
        assert resp.get_json()["data"]["pagination"]["total"] == 1

    def test_validation_envelope(self, client, salesman, dealer, make_product):
        product = make_product()
        resp = client.post(
            "/api/v1/orders",
            json=order_payload(dealer.employee_id, product.product_id, qty=0),
            headers=auth_headers(salesman),
        )
        assert resp.status_code == 422
        assert resp.get_json()["errors"][0]["field"] == "order_details[0].qty_ordered"

    def test_unknown_order_404(self, client, salesman):
        resp = client.get("/api/v1/orders/ORD-NOPE", headers=auth_headers(salesman))
        assert resp.status_code == 404
