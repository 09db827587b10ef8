from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum

from courier.domain.common.ids import MenuItemId, OrderId, OrderItemId, RestaurantId, RiderId, UserId
from courier.domain.common.money import Money


class OrderStatus(str, Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    PREPARING = "PREPARING"
    READY_FOR_PICKUP = "READY_FOR_PICKUP"
    ON_THE_WAY = "ON_THE_WAY"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


class PaymentStatus(str, Enum):
    PENDING = "PENDING"
    SUCCESSFUL = "SUCCESSFUL"
    FAILED = "FAILED"


# Delivery progression; CANCELLED sits outside it.
STATUS_SEQUENCE: tuple[OrderStatus, ...] = (
    OrderStatus.PENDING,
    OrderStatus.CONFIRMED,
    OrderStatus.PREPARING,
    OrderStatus.READY_FOR_PICKUP,
    OrderStatus.ON_THE_WAY,
    OrderStatus.DELIVERED,
)
TERMINAL_STATUSES = frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED})
CANCELLABLE_STATUSES = frozenset({OrderStatus.PENDING, OrderStatus.CONFIRMED})
RIDER_ASSIGNABLE_STATUSES = frozenset({OrderStatus.CONFIRMED, OrderStatus.PREPARING})
_RIDERLESS_STATUSES = frozenset({OrderStatus.PENDING, OrderStatus.CONFIRMED})


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    if current in TERMINAL_STATUSES:
        return False
    if target == OrderStatus.CANCELLED:
        return current in CANCELLABLE_STATUSES
    return STATUS_SEQUENCE.index(target) > STATUS_SEQUENCE.index(current)


@dataclass(frozen=True)
class OrderItem:
    item_id: OrderItemId
    menu_item_id: MenuItemId
    name: str
    quantity: int
    unit_price: Money

    def __post_init__(self) -> None:
        if self.quantity < 1:
            raise ValueError("quantity must be >= 1")

    @property
    def line_total(self) -> Money:
        return self.unit_price.times(self.quantity)


@dataclass(frozen=True)
class Order:
    order_id: OrderId
    customer_id: UserId
    restaurant_id: RestaurantId
    status: OrderStatus
    items: list[OrderItem]
    total: Money
    created_at: datetime
    rider_id: RiderId | None = None
    payment_status: PaymentStatus = PaymentStatus.PENDING
    payment_reference: str | None = None

    def __post_init__(self) -> None:
        if not self.items:
            raise ValueError("order must contain at least one item")
        currency = self.items[0].unit_price.currency
        if self.total.currency != currency:
            raise ValueError("order total currency must match item currency")
        if self.rider_id is not None and self.status in _RIDERLESS_STATUSES:
            raise ValueError(f"rider cannot be assigned while status={self.status.value}")

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def transition_to(self, target: OrderStatus) -> Order:
        if not can_transition(self.status, target):
            raise OrderTransitionError(
                f"cannot move order from status={self.status.value} to status={target.value}"
            )
        return replace(self, status=target)


def create_pending_order(
    order_id: OrderId,
    customer_id: UserId,
    restaurant_id: RestaurantId,
    items: list[OrderItem],
    now: datetime,
) -> Order:
    if not items:
        raise ValueError("order must contain at least one item")

    total = Money.zero(items[0].unit_price.currency)
    for item in items:
        total = total.plus(item.line_total)
    return Order(
        order_id=order_id,
        customer_id=customer_id,
        restaurant_id=restaurant_id,
        status=OrderStatus.PENDING,
        items=items,
        total=total,
        created_at=now,
    )


class OrderTransitionError(Exception):
    pass
