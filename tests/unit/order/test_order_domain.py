from __future__ import annotations

import sys
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from courier.domain.common.ids import MenuItemId, OrderId, OrderItemId, RestaurantId, RiderId, UserId
from courier.domain.common.money import Money
from courier.domain.order.entities import (
    Order,
    OrderItem,
    OrderStatus,
    OrderTransitionError,
    PaymentStatus,
    can_transition,
    create_pending_order,
)


def _item(quantity: int = 1, cents: int = 300, currency: str = "USD") -> OrderItem:
    return OrderItem(
        item_id=OrderItemId(f"oit_{quantity}_{cents}"),
        menu_item_id=MenuItemId("itm_001"),
        name="Item",
        quantity=quantity,
        unit_price=Money(amount_cents=cents, currency=currency),
    )


def _pending() -> Order:
    return create_pending_order(
        order_id=OrderId("ord_001"),
        customer_id=UserId("usr_001"),
        restaurant_id=RestaurantId("rst_001"),
        items=[_item(quantity=2, cents=300), _item(quantity=1, cents=150)],
        now=datetime.now(timezone.utc),
    )


def test_order_item_quantity_must_be_gte_one() -> None:
    with pytest.raises(ValueError):
        _item(quantity=0)


def test_create_pending_order_computes_total_from_items() -> None:
    order = _pending()

    assert order.status == OrderStatus.PENDING
    assert order.payment_status == PaymentStatus.PENDING
    assert order.rider_id is None
    assert order.total == Money(amount_cents=750, currency="USD")


def test_create_pending_order_rejects_mixed_currencies() -> None:
    with pytest.raises(ValueError):
        create_pending_order(
            order_id=OrderId("ord_001"),
            customer_id=UserId("usr_001"),
            restaurant_id=RestaurantId("rst_001"),
            items=[_item(currency="USD"), _item(cents=200, currency="EUR")],
            now=datetime.now(timezone.utc),
        )


def test_order_requires_items() -> None:
    with pytest.raises(ValueError):
        create_pending_order(
            order_id=OrderId("ord_001"),
            customer_id=UserId("usr_001"),
            restaurant_id=RestaurantId("rst_001"),
            items=[],
            now=datetime.now(timezone.utc),
        )


def test_rider_cannot_be_set_before_preparation() -> None:
    with pytest.raises(ValueError):
        replace(_pending(), rider_id=RiderId("rdr_001"))


@pytest.mark.parametrize(
    ("current", "target"),
    [
        (OrderStatus.PENDING, OrderStatus.CONFIRMED),
        (OrderStatus.CONFIRMED, OrderStatus.PREPARING),
        (OrderStatus.PREPARING, OrderStatus.DELIVERED),
        (OrderStatus.READY_FOR_PICKUP, OrderStatus.ON_THE_WAY),
        (OrderStatus.PENDING, OrderStatus.CANCELLED),
        (OrderStatus.CONFIRMED, OrderStatus.CANCELLED),
    ],
)
def test_forward_transitions_are_allowed(current: OrderStatus, target: OrderStatus) -> None:
    assert can_transition(current, target)


@pytest.mark.parametrize(
    ("current", "target"),
    [
        (OrderStatus.CONFIRMED, OrderStatus.PENDING),
        (OrderStatus.ON_THE_WAY, OrderStatus.PREPARING),
        (OrderStatus.PREPARING, OrderStatus.PREPARING),
        (OrderStatus.DELIVERED, OrderStatus.CANCELLED),
        (OrderStatus.CANCELLED, OrderStatus.CONFIRMED),
        (OrderStatus.PREPARING, OrderStatus.CANCELLED),
    ],
)
def test_backward_terminal_and_late_cancel_transitions_are_rejected(
    current: OrderStatus,
    target: OrderStatus,
) -> None:
    assert not can_transition(current, target)


def test_transition_to_returns_new_order_and_keeps_original() -> None:
    order = _pending()

    confirmed = order.transition_to(OrderStatus.CONFIRMED)

    assert confirmed.status == OrderStatus.CONFIRMED
    assert order.status == OrderStatus.PENDING


def test_transition_out_of_terminal_state_raises() -> None:
    cancelled = _pending().transition_to(OrderStatus.CANCELLED)

    assert cancelled.is_terminal
    with pytest.raises(OrderTransitionError):
        cancelled.transition_to(OrderStatus.DELIVERED)
