from __future__ import annotations

from dataclasses import dataclass, field

from courier.domain.order.entities import Order, OrderStatus


@dataclass(frozen=True)
class PushMessage:
    title: str
    body: str
    data: dict[str, str] = field(default_factory=dict)


STATUS_PUSH_COPY: dict[OrderStatus, tuple[str, str]] = {
    OrderStatus.PREPARING: (
        "Order Being Prepared",
        "The restaurant has started preparing your order",
    ),
    OrderStatus.READY_FOR_PICKUP: (
        "Order Ready for Pickup!",
        "Your order is ready and waiting for rider pickup",
    ),
    OrderStatus.ON_THE_WAY: (
        "Order On The Way!",
        "Your order is on the way to you",
    ),
    OrderStatus.DELIVERED: (
        "Order Delivered!",
        "Your order has been delivered. Enjoy your meal!",
    ),
}


def _short_id(order: Order) -> str:
    return str(order.order_id)[-6:]


def _data(order: Order, kind: str) -> dict[str, str]:
    return {"orderId": str(order.order_id), "type": kind}


def new_order_push(order: Order, customer_name: str | None) -> PushMessage:
    return PushMessage(
        title="New Order Received!",
        body=f"You have a new order from {customer_name or 'a customer'}",
        data=_data(order, "NEW_ORDER"),
    )


def order_confirmed_push(order: Order, restaurant_name: str) -> PushMessage:
    return PushMessage(
        title="Order Confirmed!",
        body=f"Your order has been confirmed by {restaurant_name}",
        data=_data(order, "ORDER_CONFIRMED"),
    )


def rider_assigned_push(order: Order) -> PushMessage:
    return PushMessage(
        title="Rider Assigned!",
        body="A rider has been assigned to your order",
        data=_data(order, "RIDER_ASSIGNED"),
    )


def rider_assigned_restaurant_push(order: Order) -> PushMessage:
    return PushMessage(
        title="Rider On The Way!",
        body=f"A rider has been assigned to order #{_short_id(order)}",
        data=_data(order, "RIDER_ASSIGNED"),
    )


def order_cancelled_push(order: Order) -> PushMessage:
    return PushMessage(
        title="Order Cancelled",
        body=f"Order #{_short_id(order)} has been cancelled",
        data=_data(order, "ORDER_CANCELLED"),
    )


def status_push(order: Order, status: OrderStatus) -> PushMessage | None:
    copy = STATUS_PUSH_COPY.get(status)
    if copy is None:
        return None
    title, body = copy
    return PushMessage(title=title, body=body, data=_data(order, f"ORDER_{status.value}"))
