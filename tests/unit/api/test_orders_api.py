from __future__ import annotations

import sys
from pathlib import Path

from fastapi.testclient import TestClient

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from fakes import RIDER_ID, make_order, make_services

from courier.api.main import create_app
from courier.domain.order.entities import OrderStatus


def _auth(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def _client(orders=None) -> TestClient:
    return TestClient(create_app(services=make_services(orders)))


def test_requests_without_valid_bearer_are_unauthorized() -> None:
    client = _client()

    missing = client.get("/orders")
    forged = client.get("/orders", headers=_auth("forged"))

    assert missing.status_code == 401
    assert missing.json()["error"]["code"] == "UNAUTHORIZED"
    assert forged.status_code == 401


def test_create_order_returns_created_order_with_computed_total() -> None:
    client = _client()

    response = client.post(
        "/orders",
        headers={**_auth("token-customer"), "X-Request-Id": "req-abc"},
        json={"restaurantId": "rst_001", "items": [{"itemId": "itm_001", "quantity": 2}], "totalAmount": 5},
    )

    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "PENDING"
    assert body["total"] == {"amountCents": 2900, "currency": "USD"}
    assert response.headers["X-Request-Id"] == "req-abc"


def test_create_order_validation_and_role_gate() -> None:
    client = _client()

    empty = client.post("/orders", headers=_auth("token-customer"), json={"restaurantId": "rst_001", "items": []})
    as_owner = client.post(
        "/orders",
        headers=_auth("token-owner"),
        json={"restaurantId": "rst_001", "items": [{"itemId": "itm_001", "quantity": 1}]},
    )
    unavailable = client.post(
        "/orders",
        headers=_auth("token-customer"),
        json={"restaurantId": "rst_001", "items": [{"itemId": "itm_003", "quantity": 1}]},
    )

    assert empty.status_code == 400
    assert empty.json()["error"]["code"] == "INVALID_REQUEST"
    assert as_owner.status_code == 403
    assert as_owner.json()["error"]["code"] == "FORBIDDEN"
    assert unavailable.status_code == 400
    assert unavailable.json()["error"]["code"] == "INVALID_ORDER"


def test_accept_twice_reports_not_found_the_second_time() -> None:
    client = _client([make_order()])

    first = client.put("/orders/ord_001/accept", headers=_auth("token-owner"))
    second = client.put("/orders/ord_001/accept", headers=_auth("token-owner"))

    assert first.status_code == 200
    assert first.json()["status"] == "CONFIRMED"
    assert second.status_code == 404
    assert second.json()["error"]["code"] == "ORDER_NOT_FOUND"


def test_get_order_hides_other_customers_orders() -> None:
    client = _client([make_order()])

    own = client.get("/orders/ord_001", headers=_auth("token-customer"))
    foreign = client.get("/orders/ord_001", headers=_auth("token-other-customer"))
    missing = client.get("/orders/ord_missing", headers=_auth("token-customer"))

    assert own.status_code == 200
    assert foreign.status_code == 403
    assert missing.status_code == 404


def test_status_update_conflicts_map_to_409() -> None:
    client = _client([make_order(status=OrderStatus.ON_THE_WAY, rider_id=RIDER_ID)])

    response = client.put(
        "/orders/ord_001/status",
        headers=_auth("token-owner"),
        json={"status": "PREPARING"},
    )
    bogus = client.put("/orders/ord_001/status", headers=_auth("token-owner"), json={"status": "LOST"})

    assert response.status_code == 409
    assert response.json()["error"]["code"] == "INVALID_ORDER_TRANSITION"
    assert bogus.status_code == 400


def test_status_route_refuses_cancellation() -> None:
    client = _client([make_order(status=OrderStatus.CONFIRMED)])

    response = client.put(
        "/orders/ord_001/status",
        headers=_auth("token-owner"),
        json={"status": "CANCELLED"},
    )

    assert response.status_code == 409
    assert response.json()["error"]["code"] == "INVALID_ORDER_TRANSITION"


def test_rider_flow_through_shortcut_routes() -> None:
    client = _client([make_order(status=OrderStatus.CONFIRMED)])
    rider = _auth("token-rider")

    assigned = client.put("/orders/ord_001/assign-rider", headers=rider)
    ready = client.put("/orders/ord_001/ready-for-pickup", headers=_auth("token-owner"))
    picked_up = client.put("/orders/ord_001/pickup", headers=rider)
    delivered = client.put("/orders/ord_001/deliver", headers=rider)
    listed = client.get("/orders", headers=rider)

    assert assigned.json()["riderId"] == RIDER_ID
    assert ready.json()["status"] == "READY_FOR_PICKUP"
    assert picked_up.json()["status"] == "ON_THE_WAY"
    assert delivered.json()["status"] == "DELIVERED"
    assert [order["orderId"] for order in listed.json()["orders"]] == ["ord_001"]


def test_shortcut_routes_are_role_gated() -> None:
    client = _client([make_order(status=OrderStatus.CONFIRMED)])

    response = client.put("/orders/ord_001/deliver", headers=_auth("token-customer"))

    assert response.status_code == 403


def test_foreign_customer_cannot_cancel_over_http() -> None:
    client = _client([make_order()])

    foreign = client.put("/orders/ord_001/cancel", headers=_auth("token-other-customer"))
    own = client.put("/orders/ord_001/cancel", headers=_auth("token-customer"))

    assert foreign.status_code == 403
    assert own.status_code == 200
    assert own.json()["status"] == "CANCELLED"


def test_save_fcm_token() -> None:
    services = make_services()
    client = TestClient(create_app(services=services))

    response = client.post(
        "/notifications/fcm-token",
        headers=_auth("token-customer"),
        json={"fcmToken": "device-new"},
    )
    empty = client.post("/notifications/fcm-token", headers=_auth("token-customer"), json={"fcmToken": ""})

    assert response.status_code == 200
    assert response.json() == {"message": "FCM token saved successfully"}
    assert services.token_store.tokens["usr_customer"] == "device-new"
    assert empty.status_code == 400
