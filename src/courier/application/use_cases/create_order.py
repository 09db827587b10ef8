from __future__ import annotations

import logging
from datetime import datetime, timezone
from uuid import uuid4

from courier.application.dto.requests import CreateOrderRequest
from courier.application.dto.responses import OrderResponse
from courier.application.mappers.event_envelope import order_event_payload
from courier.application.mappers.order_mapper import to_order_response
from courier.application.metrics.order_lifecycle import record_order_status, record_rejection
from courier.application.notifications.push_messages import new_order_push
from courier.application.ports.repositories import MenuRepository, OrderRepository, PartyDirectory
from courier.application.use_cases.context import TraceContext
from courier.application.use_cases.errors import InvalidOrderRequestError, RestaurantNotFoundError
from courier.application.use_cases.fanout import OrderFanout
from courier.domain.common.ids import MenuItemId, OrderId, OrderItemId, RestaurantId, UserId
from courier.domain.order.entities import OrderItem, create_pending_order
from courier.domain.order.events import OrderEventKind

logger = logging.getLogger(__name__)


class CreateOrder:
    def __init__(
        self,
        order_repository: OrderRepository,
        menu_repository: MenuRepository,
        party_directory: PartyDirectory,
        fanout: OrderFanout,
    ) -> None:
        self._order_repository = order_repository
        self._menu_repository = menu_repository
        self._party_directory = party_directory
        self._fanout = fanout

    async def execute(
        self,
        customer_id: UserId,
        request_dto: CreateOrderRequest,
        trace_ctx: TraceContext,
    ) -> OrderResponse:
        if not request_dto.items:
            raise InvalidOrderRequestError("order must contain at least one item")

        restaurant_id = RestaurantId(request_dto.restaurant_id)
        restaurant = await self._party_directory.get_restaurant(restaurant_id)
        if restaurant is None:
            raise RestaurantNotFoundError(f"restaurant {restaurant_id} not found")

        requested_ids = [MenuItemId(item.item_id) for item in request_dto.items]
        menu_items = await self._menu_repository.get_items(restaurant_id, requested_ids)

        # Prices always come from the stored menu, never from the client.
        order_items: list[OrderItem] = []
        for request_item in request_dto.items:
            if request_item.quantity < 1:
                raise InvalidOrderRequestError("quantity must be >= 1")

            menu_item = menu_items.get(MenuItemId(request_item.item_id))
            if menu_item is None:
                record_rejection("create", "unknown_item")
                raise InvalidOrderRequestError(
                    f"menu item {request_item.item_id} does not exist for restaurant {restaurant_id}"
                )
            if not menu_item.is_available:
                record_rejection("create", "unavailable_item")
                raise InvalidOrderRequestError(f"menu item {request_item.item_id} is unavailable")

            order_items.append(
                OrderItem(
                    item_id=OrderItemId(f"oit_{uuid4().hex[:12]}"),
                    menu_item_id=menu_item.item_id,
                    name=menu_item.name,
                    quantity=request_item.quantity,
                    unit_price=menu_item.price_money,
                )
            )

        try:
            order = create_pending_order(
                order_id=OrderId(f"ord_{uuid4().hex[:12]}"),
                customer_id=customer_id,
                restaurant_id=restaurant_id,
                items=order_items,
                now=datetime.now(timezone.utc),
            )
        except ValueError as exc:
            raise InvalidOrderRequestError(str(exc)) from exc

        if request_dto.total_amount is not None and request_dto.total_amount != order.total.amount_cents:
            logger.warning(
                "order_total_mismatch",
                extra={
                    "order_id": order.order_id,
                    "client_total_cents": request_dto.total_amount,
                    "computed_total_cents": order.total.amount_cents,
                },
            )

        persisted = await self._order_repository.create(order)
        record_order_status(persisted)
        logger.info(
            "order_created",
            extra={"order_id": persisted.order_id, "restaurant_id": persisted.restaurant_id},
        )

        customer = await self._fanout.customer_profile(persisted)
        payload = order_event_payload(
            occurred_at=persisted.created_at,
            order=persisted,
            trace_ctx=trace_ctx,
        )
        await self._fanout.notify_restaurant(
            persisted,
            OrderEventKind.NEW_ORDER,
            payload,
            push=new_order_push(persisted, customer.name if customer else None),
        )
        return to_order_response(persisted)
