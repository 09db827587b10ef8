from __future__ import annotations

from datetime import datetime, timezone

from prometheus_client import Counter, Histogram

from courier.domain.order.entities import Order, OrderStatus

ORDERS_TOTAL = Counter(
    "courier_orders_total",
    "Total number of orders observed by status.",
    ["restaurant_id", "status"],
)

ORDER_TRANSITION_TOTAL = Counter(
    "courier_order_transition_total",
    "Total number of order lifecycle transitions.",
    ["from", "to"],
)

ORDER_REJECTED_TOTAL = Counter(
    "courier_order_rejected_total",
    "Total number of order mutations rejected before persistence.",
    ["operation", "reason"],
)

ORDER_TIME_TO_ACCEPT_SECONDS = Histogram(
    "courier_order_time_to_accept_seconds",
    "Time between order creation and restaurant acceptance.",
)

ORDER_TIME_TO_DELIVER_SECONDS = Histogram(
    "courier_order_time_to_deliver_seconds",
    "Time between order creation and delivery.",
)


def record_order_status(order: Order) -> None:
    ORDERS_TOTAL.labels(
        restaurant_id=str(order.restaurant_id),
        status=order.status.value,
    ).inc()


def record_transition(from_status: OrderStatus, to_status: OrderStatus) -> None:
    ORDER_TRANSITION_TOTAL.labels(**{"from": from_status.value, "to": to_status.value}).inc()


def record_rejection(operation: str, reason: str) -> None:
    ORDER_REJECTED_TOTAL.labels(operation=operation, reason=reason).inc()


def record_time_to_accept(order: Order, now: datetime | None = None) -> None:
    current = now or datetime.now(timezone.utc)
    ORDER_TIME_TO_ACCEPT_SECONDS.observe(max((current - order.created_at).total_seconds(), 0.0))


def record_time_to_deliver(order: Order, now: datetime | None = None) -> None:
    current = now or datetime.now(timezone.utc)
    ORDER_TIME_TO_DELIVER_SECONDS.observe(max((current - order.created_at).total_seconds(), 0.0))
