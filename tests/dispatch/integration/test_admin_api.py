"""Integration tests for the admin endpoints via TestClient."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from dispatch.api import admin_router, driver_router, order_router, register_error_handlers, seller_router

ADMIN = {"X-Principal-Id": "admin-001", "X-Principal-Role": "ADMIN"}


@pytest.fixture()
def client():
    app = FastAPI()
    app.include_router(admin_router)
    app.include_router(order_router)
    app.include_router(seller_router)
    app.include_router(driver_router)
    register_error_handlers(app)
    return TestClient(app)


def _place_order(client, **overrides):
    body = {
        "customer_id": "cust-api-001",
        "customer_name": "Asha Rao",
        "customer_email": "asha@example.com",
        "full_address": "12 MG Road, Bengaluru",
        "pincode": "560001",
        "items": [
            {
                "product_id": "prod-001",
                "product_name": "Basmati Rice 5kg",
                "sku": "RICE-5KG",
                "images": ["https://cdn.example.com/rice.jpg"],
                "quantity": 2,
                "unit_price": 100.0,
            }
        ],
        "delivery_fee": 25.0,
        "taxes": 10.0,
    }
    body.update(overrides)
    response = client.post("/orders", json=body)
    assert response.status_code == 201
    return response.json()["order_id"]


def _ready_driver(client, name="Ravi Kumar", role="DELIVERY_DRIVER"):
    response = client.post("/drivers", json={"user_id": f"user-{name}", "name": name, "role": role})
    assert response.status_code == 201
    driver_id = response.json()["driver_id"]
    client.patch(f"/admin/drivers/{driver_id}/verification", json={"status": "VERIFIED"}, headers=ADMIN)
    as_driver = {"X-Principal-Id": f"user-{name}", "X-Principal-Role": role}
    response = client.put(f"/drivers/{driver_id}/online", headers=as_driver)
    assert response.status_code == 200
    return driver_id


class TestAdminGuard:
    def test_missing_principal_is_forbidden(self, client):
        response = client.get("/admin/orders")
        assert response.status_code == 403
        assert response.json()["error"] == "Forbidden"
        assert response.json()["message"] == "Admin access required."

    def test_non_admin_role_is_forbidden(self, client):
        response = client.get(
            "/admin/drivers/available",
            headers={"X-Principal-Id": "cust-001", "X-Principal-Role": "CUSTOMER"},
        )
        assert response.status_code == 403


class TestListAndDetail:
    def test_list_orders(self, client):
        for _ in range(3):
            _place_order(client)

        response = client.get("/admin/orders", params={"page": 1, "limit": 2}, headers=ADMIN)

        assert response.status_code == 200
        data = response.json()
        assert len(data["orders"]) == 2
        assert data["pagination"] == {"total": 3, "page": 1, "limit": 2, "total_pages": 2}
        assert data["status_counts"] == {"PENDING": 3}

    def test_malformed_parameters(self, client):
        response = client.get("/admin/orders", params={"status": "SHIPPED"}, headers=ADMIN)
        assert response.status_code == 400
        assert response.json()["error"] == "MalformedInput"

    def test_inverted_date_range(self, client):
        response = client.get(
            "/admin/orders",
            params={"date_from": "2024-02-01", "date_to": "2024-01-01"},
            headers=ADMIN,
        )
        assert response.status_code == 400

    def test_order_detail(self, client):
        order_id = _place_order(client)
        response = client.get(f"/admin/orders/{order_id}", headers=ADMIN)
        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 235.0
        assert data["seller_name"] == "Unknown"
        assert data["items"][0]["image"] == "https://cdn.example.com/rice.jpg"

    def test_unknown_order(self, client):
        response = client.get("/admin/orders/missing", headers=ADMIN)
        assert response.status_code == 404
        assert response.json()["error"] == "NotFound"


class TestStatusEndpoint:
    def test_illegal_transition(self, client):
        order_id = _place_order(client)
        response = client.patch(f"/admin/orders/{order_id}/status", json={"status": "PICKED"}, headers=ADMIN)
        assert response.status_code == 400
        assert response.json()["error"] == "IllegalTransition"

    def test_legal_transition(self, client):
        order_id = _place_order(client)
        response = client.patch(f"/admin/orders/{order_id}/status", json={"status": "CONFIRMED"}, headers=ADMIN)
        assert response.status_code == 200
        assert response.json()["status"] == "CONFIRMED"
        assert response.json()["version"] == 1

    def test_forced_override(self, client):
        order_id = _place_order(client)
        response = client.patch(
            f"/admin/orders/{order_id}/status",
            json={"status": "DELIVERED", "force": True},
            headers=ADMIN,
        )
        assert response.status_code == 200
        assert response.json()["forced"] is True

    def test_stale_version(self, client):
        order_id = _place_order(client)
        client.patch(f"/admin/orders/{order_id}/status", json={"status": "CONFIRMED"}, headers=ADMIN)
        response = client.patch(
            f"/admin/orders/{order_id}/status",
            json={"status": "CANCELLED", "expected_version": 0},
            headers=ADMIN,
        )
        assert response.status_code == 409
        assert response.json()["error"] == "Conflict"


class TestAssignmentEndpoints:
    def test_available_drivers_and_assignment(self, client):
        order_id = _place_order(client)
        driver_id = _ready_driver(client)

        response = client.get("/admin/drivers/available", headers=ADMIN)
        assert response.status_code == 200
        assert [d["id"] for d in response.json()] == [driver_id]

        response = client.patch(f"/admin/orders/{order_id}/driver", json={"driver_id": driver_id}, headers=ADMIN)
        assert response.status_code == 200
        assert response.json()["changed"] is True
        assert response.json()["id"] == order_id
        assert response.json()["driver_id"] == driver_id

        response = client.patch(f"/admin/orders/{order_id}/driver", json={"driver_id": driver_id}, headers=ADMIN)
        assert response.json()["changed"] is False

    def test_ineligible_driver(self, client):
        order_id = _place_order(client)
        response = client.post("/drivers", json={"user_id": "user-x", "name": "Unverified", "role": "DELIVERY_DRIVER"})
        driver_id = response.json()["driver_id"]

        response = client.patch(f"/admin/orders/{order_id}/driver", json={"driver_id": driver_id}, headers=ADMIN)
        assert response.status_code == 400
        assert response.json()["error"] == "IneligibleDriver"


class TestDeleteEndpoint:
    def test_soft_delete_hides_order(self, client):
        order_id = _place_order(client)

        response = client.delete(f"/admin/orders/{order_id}", headers=ADMIN)
        assert response.status_code == 204

        assert client.get(f"/admin/orders/{order_id}", headers=ADMIN).status_code == 404
        assert client.get("/admin/orders", headers=ADMIN).json()["pagination"]["total"] == 0
