from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from fakes import (
    CUSTOMER,
    OTHER_CUSTOMER,
    OTHER_OWNER,
    OTHER_RIDER,
    OWNER,
    RIDER,
    RIDER_ID,
    FakePartyDirectory,
    make_order,
)

from courier.application.use_cases.authorization import AUTHORIZATION_RULES, OrderOperation, authorize
from courier.application.use_cases.errors import OrderAccessForbiddenError
from courier.domain.order.entities import OrderStatus
from courier.domain.party.entities import Actor, Role


def _allowed(operation: OrderOperation, actor: Actor) -> bool:
    order = make_order(status=OrderStatus.PREPARING, rider_id=RIDER_ID)
    try:
        asyncio.run(authorize(operation, actor, order, FakePartyDirectory()))
    except OrderAccessForbiddenError:
        return False
    return True


@pytest.mark.parametrize("operation", list(OrderOperation))
def test_owning_parties_are_allowed_and_strangers_denied(operation: OrderOperation) -> None:
    assert _allowed(operation, CUSTOMER)
    assert _allowed(operation, OWNER)
    assert not _allowed(operation, OTHER_CUSTOMER)
    assert not _allowed(operation, OTHER_OWNER)
    assert not _allowed(operation, OTHER_RIDER)


def test_assigned_rider_may_view_and_update_but_not_cancel() -> None:
    assert _allowed(OrderOperation.VIEW, RIDER)
    assert _allowed(OrderOperation.UPDATE_STATUS, RIDER)
    assert not _allowed(OrderOperation.CANCEL, RIDER)


def test_missing_rule_denies_with_role_message() -> None:
    assert (OrderOperation.CANCEL, Role.RIDER) not in AUTHORIZATION_RULES

    with pytest.raises(OrderAccessForbiddenError, match="RIDER is not allowed to cancel"):
        asyncio.run(
            authorize(
                OrderOperation.CANCEL,
                RIDER,
                make_order(status=OrderStatus.PREPARING, rider_id=RIDER_ID),
                FakePartyDirectory(),
            )
        )
