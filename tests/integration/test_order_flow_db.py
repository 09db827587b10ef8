from __future__ import annotations

import sys
from pathlib import Path

from fastapi.testclient import TestClient

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))
sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "unit"))

from fakes import FakeTokenVerifier, RecordingPushProvider

from courier.api.main import create_app
from courier.api.services import AppServices
from courier.infrastructure.db.repositories.menu_repo import SqlAlchemyMenuRepository
from courier.infrastructure.db.repositories.order_repo import SqlAlchemyOrderRepository
from courier.infrastructure.db.repositories.party_repo import (
    SqlAlchemyDeviceTokenStore,
    SqlAlchemyPartyDirectory,
)


def _auth(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def test_order_flow_is_persisted(sessions) -> None:
    provider = RecordingPushProvider()
    services = AppServices(
        order_repository=SqlAlchemyOrderRepository(sessions),
        menu_repository=SqlAlchemyMenuRepository(sessions),
        party_directory=SqlAlchemyPartyDirectory(sessions),
        token_store=SqlAlchemyDeviceTokenStore(sessions),
        push_provider=provider,
        verifier=FakeTokenVerifier(),
    )

    with TestClient(create_app(services=services)) as client:
        created = client.post(
            "/orders",
            headers=_auth("token-customer"),
            json={"restaurantId": "rst_001", "items": [{"itemId": "itm_001", "quantity": 1}]},
        )
        assert created.status_code == 201
        order_id = created.json()["orderId"]

        accepted = client.put(f"/orders/{order_id}/accept", headers=_auth("token-owner"))
        assert accepted.status_code == 200
        assert accepted.json()["status"] == "CONFIRMED"

        again = client.put(f"/orders/{order_id}/accept", headers=_auth("token-owner"))
        assert again.status_code == 404

        assigned = client.put(f"/orders/{order_id}/assign-rider", headers=_auth("token-rider"))
        assert assigned.status_code == 200
        assert assigned.json()["riderId"] == "rdr_001"

        stolen = client.put(f"/orders/{order_id}/assign-rider", headers=_auth("token-other-rider"))
        assert stolen.status_code == 404

        saved = client.post(
            "/notifications/fcm-token",
            headers=_auth("token-customer"),
            json={"fcmToken": "device-customer"},
        )
        assert saved.status_code == 200

        delivered = client.put(f"/orders/{order_id}/deliver", headers=_auth("token-rider"))
        assert delivered.status_code == 200

        fetched = client.get(f"/orders/{order_id}", headers=_auth("token-customer"))
        assert fetched.json()["status"] == "DELIVERED"

    assert provider.sent[-1].device_token == "device-customer"
    assert provider.sent[-1].body == "Your order has been delivered. Enjoy your meal!"
