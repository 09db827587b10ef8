from __future__ import annotations

import logging
from datetime import datetime, timezone

from courier.application.dto.responses import OrderResponse
from courier.application.mappers.event_envelope import order_event_payload
from courier.application.mappers.order_mapper import to_order_response
from courier.application.metrics.order_lifecycle import (
    record_order_status,
    record_rejection,
    record_time_to_deliver,
    record_transition,
)
from courier.application.notifications.push_messages import status_push
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


class UpdateOrderStatus:
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
        order_id: OrderId,
        new_status: OrderStatus,
        actor: Actor,
        trace_ctx: TraceContext,
    ) -> OrderResponse:
        order = await self._order_repository.find_by_id(order_id)
        if order is None:
            raise OrderNotFoundError(f"order {order_id} not found")

        await authorize(OrderOperation.UPDATE_STATUS, actor, order, self._party_directory)

        # Cancellation has its own owner rules and customer push; see CancelOrder.
        if new_status == OrderStatus.CANCELLED:
            record_rejection("update_status", "cancel_via_status")
            raise InvalidOrderTransitionError("orders are cancelled through the cancel operation")

        try:
            order.transition_to(new_status)
        except OrderTransitionError as exc:
            record_rejection("update_status", "invalid_transition")
            raise InvalidOrderTransitionError(str(exc)) from exc

        updated = await self._order_repository.update_status(
            order_id=order_id,
            new_status=new_status,
            where=OrderUpdateFilter(statuses=(order.status,)),
        )
        if updated is None:
            # Someone else moved the order between the read and the write.
            record_rejection("update_status", "no_match")
            raise OrderNotFoundError(f"order {order_id} not found")

        occurred_at = datetime.now(timezone.utc)
        record_transition(from_status=order.status, to_status=new_status)
        record_order_status(updated)
        if new_status == OrderStatus.DELIVERED:
            record_time_to_deliver(updated, now=occurred_at)
        logger.info(
            "order_status_updated",
            extra={
                "order_id": updated.order_id,
                "from_status": order.status.value,
                "to_status": new_status.value,
                "actor_id": actor.user_id,
                "role": actor.role.value,
            },
        )

        payload = order_event_payload(occurred_at=occurred_at, order=updated, trace_ctx=trace_ctx)
        await self._fanout.notify_all(
            updated,
            payload,
            customer_push=status_push(updated, new_status),
        )
        return to_order_response(updated)
