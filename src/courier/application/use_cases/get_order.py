from __future__ import annotations

from courier.application.dto.responses import OrderResponse
from courier.application.mappers.order_mapper import to_order_response
from courier.application.ports.repositories import OrderRepository, PartyDirectory
from courier.application.use_cases.authorization import OrderOperation, authorize
from courier.application.use_cases.errors import OrderNotFoundError
from courier.domain.common.ids import OrderId
from courier.domain.party.entities import Actor


class GetOrder:
    def __init__(self, order_repository: OrderRepository, party_directory: PartyDirectory) -> None:
        self._order_repository = order_repository
        self._party_directory = party_directory

    async def execute(self, order_id: OrderId, actor: Actor) -> OrderResponse:
        order = await self._order_repository.find_by_id(order_id)
        if order is None:
            raise OrderNotFoundError(f"order {order_id} not found")
        await authorize(OrderOperation.VIEW, actor, order, self._party_directory)
        return to_order_response(order)
