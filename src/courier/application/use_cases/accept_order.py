from __future__ import annotations

import logging
from datetime import datetime, timezone

from courier.application.dto.responses import OrderResponse
from courier.application.mappers.event_envelope import order_event_payload
from courier.application.mappers.order_mapper import to_order_response
from courier.application.metrics.order_lifecycle import (
    record_order_status,
    record_rejection,
    record_time_to_accept,
    record_transition,
)
from courier.application.notifications.push_messages import order_confirmed_push
from courier.application.ports.repositories import (
    OrderRepository,
    OrderUpdateFilter,
    PartyDirectory,
)
from courier.application.use_cases.context import TraceContext
from courier.application.use_cases.errors import OrderNotFoundError
from courier.application.use_cases.fanout import OrderFanout
from courier.domain.common.ids import OrderId, UserId
from courier.domain.order.entities import OrderStatus
from courier.domain.order.events import OrderEventKind

logger = logging.getLogger(__name__)


class AcceptOrder:
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
        owner_id: UserId,
        order_id: OrderId,
        trace_ctx: TraceContext,
    ) -> OrderResponse:
        restaurant = await self._party_directory.restaurant_by_owner(owner_id)
        if restaurant is None:
            record_rejection("accept", "no_restaurant")
            raise OrderNotFoundError("order not found or already processed")

        # The conditional update is the only guard against a double accept.
        accepted = await self._order_repository.update_status(
            order_id=order_id,
            new_status=OrderStatus.CONFIRMED,
            where=OrderUpdateFilter(
                statuses=(OrderStatus.PENDING,),
                restaurant_id=restaurant.restaurant_id,
            ),
        )
        if accepted is None:
            record_rejection("accept", "no_match")
            raise OrderNotFoundError("order not found or already processed")

        occurred_at = datetime.now(timezone.utc)
        record_transition(from_status=OrderStatus.PENDING, to_status=OrderStatus.CONFIRMED)
        record_order_status(accepted)
        record_time_to_accept(accepted, now=occurred_at)
        logger.info(
            "order_accepted",
            extra={"order_id": accepted.order_id, "restaurant_id": accepted.restaurant_id},
        )

        payload = order_event_payload(occurred_at=occurred_at, order=accepted, trace_ctx=trace_ctx)
        await self._fanout.notify_customer(
            accepted,
            OrderEventKind.ORDER_UPDATED,
            payload,
            push=order_confirmed_push(accepted, restaurant.name),
        )
        await self._fanout.broadcast_riders(OrderEventKind.NEW_ORDER_AVAILABLE, payload)
        return to_order_response(accepted)
