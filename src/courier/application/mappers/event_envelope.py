from __future__ import annotations

import json
from datetime import datetime
from typing import Any
from uuid import uuid4

from courier.application.mappers.order_mapper import to_order_response
from courier.application.use_cases.context import TraceContext
from courier.domain.order.entities import Order


def serialize_frame(event: str, data: Any) -> str:
    return json.dumps({"event": event, "data": data}, separators=(",", ":"), ensure_ascii=False)


def order_snapshot(order: Order) -> dict[str, Any]:
    return to_order_response(order).model_dump(mode="json")


def order_event_payload(
    *,
    occurred_at: datetime,
    order: Order,
    trace_ctx: TraceContext,
) -> dict[str, Any]:
    return {
        "eventId": str(uuid4()),
        "occurredAt": occurred_at.isoformat(),
        "requestId": trace_ctx.request_id,
        "traceId": trace_ctx.trace_id,
        "order": order_snapshot(order),
    }
