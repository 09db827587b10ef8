from __future__ import annotations

from courier.application.dto.responses import OrdersResponse
from courier.application.mappers.order_mapper import to_orders_response
from courier.application.ports.repositories import OrderRepository, PartyDirectory
from courier.domain.order.entities import Order
from courier.domain.party.entities import Actor, Role


class ListOrders:
    def __init__(self, order_repository: OrderRepository, party_directory: PartyDirectory) -> None:
        self._order_repository = order_repository
        self._party_directory = party_directory

    async def execute(self, actor: Actor) -> OrdersResponse:
        return to_orders_response(await self._orders_for(actor))

    async def _orders_for(self, actor: Actor) -> list[Order]:
        if actor.role == Role.USER:
            return await self._order_repository.list_for_customer(actor.user_id)

        if actor.role == Role.RESTAURANT:
            restaurant = await self._party_directory.restaurant_by_owner(actor.user_id)
            if restaurant is None:
                return []
            return await self._order_repository.list_for_restaurant(restaurant.restaurant_id)

        rider = await self._party_directory.rider_by_user(actor.user_id)
        if rider is None:
            return []
        return await self._order_repository.list_for_rider(rider.rider_id)
