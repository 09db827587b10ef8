from __future__ import annotations

import logging
from typing import Any

from courier.application.notifications.dispatcher import NotificationDispatcher
from courier.application.notifications.push_messages import PushMessage
from courier.application.ports.repositories import PartyDirectory
from courier.domain.common.ids import UserId
from courier.domain.order.entities import Order
from courier.domain.order.events import OrderEventKind
from courier.domain.party.entities import Role, UserProfile

logger = logging.getLogger(__name__)


class OrderFanout:
    """Resolves an order's parties to user identities and notifies them.

    Restaurants and riders hold connections and push tokens as users, so
    every target goes through the owner link first. Lookup failures are
    logged and skip that party only.
    """

    def __init__(self, party_directory: PartyDirectory, dispatcher: NotificationDispatcher) -> None:
        self._party_directory = party_directory
        self._dispatcher = dispatcher

    async def customer_profile(self, order: Order) -> UserProfile | None:
        try:
            return await self._party_directory.get_user(order.customer_id)
        except Exception:
            logger.exception("fanout_customer_lookup_failed", extra={"order_id": order.order_id})
            return None

    async def restaurant_owner_id(self, order: Order) -> UserId | None:
        try:
            restaurant = await self._party_directory.get_restaurant(order.restaurant_id)
        except Exception:
            logger.exception("fanout_restaurant_lookup_failed", extra={"order_id": order.order_id})
            return None
        return restaurant.owner_id if restaurant is not None else None

    async def rider_user_id(self, order: Order) -> UserId | None:
        if order.rider_id is None:
            return None
        try:
            rider = await self._party_directory.get_rider(order.rider_id)
        except Exception:
            logger.exception("fanout_rider_lookup_failed", extra={"order_id": order.order_id})
            return None
        return rider.user_id if rider is not None else None

    async def notify_customer(
        self,
        order: Order,
        kind: OrderEventKind,
        payload: dict[str, Any],
        push: PushMessage | None = None,
    ) -> None:
        await self._dispatcher.notify(order.customer_id, Role.USER, kind, payload, push=push)

    async def notify_restaurant(
        self,
        order: Order,
        kind: OrderEventKind,
        payload: dict[str, Any],
        push: PushMessage | None = None,
    ) -> None:
        owner_id = await self.restaurant_owner_id(order)
        if owner_id is None:
            logger.warning(
                "fanout_restaurant_owner_unknown",
                extra={"order_id": order.order_id, "restaurant_id": order.restaurant_id},
            )
            return
        await self._dispatcher.notify(owner_id, Role.RESTAURANT, kind, payload, push=push)

    async def notify_rider(
        self,
        order: Order,
        kind: OrderEventKind,
        payload: dict[str, Any],
        push: PushMessage | None = None,
    ) -> None:
        rider_user_id = await self.rider_user_id(order)
        if rider_user_id is None:
            return
        await self._dispatcher.notify(rider_user_id, Role.RIDER, kind, payload, push=push)

    async def broadcast_riders(self, kind: OrderEventKind, payload: dict[str, Any]) -> int:
        return await self._dispatcher.broadcast(Role.RIDER, kind, payload)

    async def notify_all(
        self,
        order: Order,
        payload: dict[str, Any],
        customer_push: PushMessage | None = None,
    ) -> None:
        await self.notify_customer(order, OrderEventKind.ORDER_UPDATED, payload, push=customer_push)
        await self.notify_restaurant(order, OrderEventKind.ORDER_UPDATED, payload)
        await self.notify_rider(order, OrderEventKind.ORDER_UPDATED, payload)
