from __future__ import annotations

import logging
from datetime import datetime, timezone

from courier.application.dto.responses import OrderResponse
from courier.application.mappers.event_envelope import order_event_payload
from courier.application.mappers.order_mapper import to_order_response
from courier.application.metrics.order_lifecycle import record_order_status, record_rejection
from courier.application.notifications.push_messages import (
    rider_assigned_push,
    rider_assigned_restaurant_push,
)
from courier.application.ports.repositories import (
    OrderRepository,
    OrderUpdateFilter,
    PartyDirectory,
)
from courier.application.use_cases.context import TraceContext
from courier.application.use_cases.errors import OrderAccessForbiddenError, OrderNotFoundError
from courier.application.use_cases.fanout import OrderFanout
from courier.domain.common.ids import OrderId, UserId
from courier.domain.order.entities import RIDER_ASSIGNABLE_STATUSES, OrderStatus
from courier.domain.order.events import OrderEventKind

logger = logging.getLogger(__name__)

_ASSIGNABLE = tuple(sorted(RIDER_ASSIGNABLE_STATUSES, key=lambda status: status.value))


class AssignRider:
    def __init__(
        self,
        order_repository: OrderRepository,
        party_directory: PartyDirectory,
        fanout: OrderFanout,
    ) -> None:
        self._order_repository = order_repository
        self._party_directory = party_directory
        self._fanout = fanout

    async def execute(
        self,
        rider_user_id: UserId,
        order_id: OrderId,
        trace_ctx: TraceContext,
    ) -> OrderResponse:
        rider = await self._party_directory.rider_by_user(rider_user_id)
        if rider is None:
            record_rejection("assign_rider", "no_rider_profile")
            raise OrderAccessForbiddenError("only registered riders can take orders")

        assigned = await self._order_repository.update_status(
            order_id=order_id,
            new_status=OrderStatus.PREPARING,
            where=OrderUpdateFilter(statuses=_ASSIGNABLE, require_unassigned_rider=True),
            rider_id=rider.rider_id,
        )
        if assigned is None:
            record_rejection("assign_rider", "no_match")
            raise OrderNotFoundError("order not found or cannot be assigned")

        record_order_status(assigned)
        logger.info(
            "order_rider_assigned",
            extra={"order_id": assigned.order_id, "rider_id": rider.rider_id},
        )

        payload = order_event_payload(
            occurred_at=datetime.now(timezone.utc),
            order=assigned,
            trace_ctx=trace_ctx,
        )
        await self._fanout.notify_customer(
            assigned,
            OrderEventKind.ORDER_UPDATED,
            payload,
            push=rider_assigned_push(assigned),
        )
        await self._fanout.notify_restaurant(
            assigned,
            OrderEventKind.ORDER_UPDATED,
            payload,
            push=rider_assigned_restaurant_push(assigned),
        )
        await self._fanout.notify_rider(assigned, OrderEventKind.ORDER_ASSIGNED, payload)
        return to_order_response(assigned)
