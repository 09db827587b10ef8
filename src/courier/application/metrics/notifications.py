from __future__ import annotations

from prometheus_client import Counter, Gauge

REALTIME_DELIVERIES_TOTAL = Counter(
    "courier_realtime_deliveries_total",
    "Realtime notification attempts by event and outcome.",
    ["event", "outcome"],
)

PUSH_NOTIFICATIONS_TOTAL = Counter(
    "courier_push_notifications_total",
    "Push notification attempts by outcome.",
    ["outcome"],
)

REALTIME_CONNECTIONS = Gauge(
    "courier_realtime_connections",
    "Authenticated realtime connections by role.",
    ["role"],
)

REALTIME_AUTH_TOTAL = Counter(
    "courier_realtime_auth_total",
    "Realtime authentication attempts by outcome.",
    ["outcome"],
)


def record_realtime_delivery(event: str, outcome: str) -> None:
    REALTIME_DELIVERIES_TOTAL.labels(event=event, outcome=outcome).inc()


def record_push(outcome: str) -> None:
    PUSH_NOTIFICATIONS_TOTAL.labels(outcome=outcome).inc()


def record_auth(outcome: str) -> None:
    REALTIME_AUTH_TOTAL.labels(outcome=outcome).inc()


def set_connection_count(role: str, count: int) -> None:
    REALTIME_CONNECTIONS.labels(role=role).set(count)
