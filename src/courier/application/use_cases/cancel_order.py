from __future__ import annotations

import logging
from datetime import datetime, timezone

from courier.application.dto.responses import OrderResponse
from courier.application.mappers.event_envelope import order_event_payload
from courier.application.mappers.order_mapper import to_order_response
from courier.application.metrics.order_lifecycle import (
    record_order_status,
    record_rejection,
    record_transition,
)
from courier.application.notifications.push_messages import order_cancelled_push
from courier.application.ports.repositories import (
    OrderRepository,
    OrderUpdateFilter,
    PartyDirectory,
)
from courier.application.use_cases.authorization import OrderOperation, authorize
from courier.application.use_cases.context import TraceContext
from courier.application.use_cases.errors import InvalidOrderTransitionError, OrderNotFoundError
from courier.application.use_cases.fanout import OrderFanout
from courier.domain.common.ids import OrderId
from courier.domain.order.entities import OrderStatus, OrderTransitionError
from courier.domain.party.entities import Actor

logger = logging.getLogger(__name__)


class CancelOrder:
    def __init__(
        self,
        order_repository: OrderRepository,
        party_directory: PartyDirectory,
        fanout: OrderFanout,
    ) -> None:
        self._order_repository = order_repository
        self._party_directory = party_directory
        self._fanout = fanout

    async def execute(self, order_id: OrderId, actor: Actor, trace_ctx: TraceContext) -> OrderResponse:
        order = await self._order_repository.find_by_id(order_id)
        if order is None:
            raise OrderNotFoundError(f"order {order_id} not found")

        await authorize(OrderOperation.CANCEL, actor, order, self._party_directory)

        try:
            order.transition_to(OrderStatus.CANCELLED)
        except OrderTransitionError as exc:
            record_rejection("cancel", "invalid_transition")
            raise InvalidOrderTransitionError(str(exc)) from exc

        cancelled = await self._order_repository.update_status(
            order_id=order_id,
            new_status=OrderStatus.CANCELLED,
            where=OrderUpdateFilter(statuses=(order.status,)),
        )
        if cancelled is None:
            record_rejection("cancel", "no_match")
            raise OrderNotFoundError(f"order {order_id} not found")

        record_transition(from_status=order.status, to_status=OrderStatus.CANCELLED)
        record_order_status(cancelled)
        logger.info(
            "order_cancelled",
            extra={
                "order_id": cancelled.order_id,
                "actor_id": actor.user_id,
                "role": actor.role.value,
            },
        )

        payload = order_event_payload(
            occurred_at=datetime.now(timezone.utc),
            order=cancelled,
            trace_ctx=trace_ctx,
        )
        await self._fanout.notify_all(
            cancelled,
            payload,
            customer_push=order_cancelled_push(cancelled),
        )
        return to_order_response(cancelled)
