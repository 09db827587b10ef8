from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from courier.domain.common.ids import MenuItemId, OrderId, RestaurantId, RiderId, UserId
from courier.domain.menu.entities import MenuItem
from courier.domain.order.entities import Order, OrderStatus
from courier.domain.party.entities import RestaurantProfile, RiderProfile, UserProfile


@dataclass(frozen=True)
class OrderUpdateFilter:
    """Predicate the stored row must still match for a conditional update to apply."""

    statuses: tuple[OrderStatus, ...] = ()
    restaurant_id: RestaurantId | None = None
    require_unassigned_rider: bool = False

    def matches(self, order: Order) -> bool:
        if self.statuses and order.status not in self.statuses:
            return False
        if self.restaurant_id is not None and order.restaurant_id != self.restaurant_id:
            return False
        if self.require_unassigned_rider and order.rider_id is not None:
            return False
        return True


class OrderRepository(Protocol):
    async def create(self, order: Order) -> Order: ...

    async def find_by_id(self, order_id: OrderId) -> Order | None: ...

    async def update_status(
        self,
        order_id: OrderId,
        new_status: OrderStatus,
        where: OrderUpdateFilter,
        rider_id: RiderId | None = None,
    ) -> Order | None: ...

    async def list_for_customer(self, customer_id: UserId) -> list[Order]: ...

    async def list_for_restaurant(self, restaurant_id: RestaurantId) -> list[Order]: ...

    async def list_for_rider(self, rider_id: RiderId) -> list[Order]: ...


class PartyDirectory(Protocol):
    async def get_user(self, user_id: UserId) -> UserProfile | None: ...

    async def get_restaurant(self, restaurant_id: RestaurantId) -> RestaurantProfile | None: ...

    async def restaurant_by_owner(self, owner_id: UserId) -> RestaurantProfile | None: ...

    async def get_rider(self, rider_id: RiderId) -> RiderProfile | None: ...

    async def rider_by_user(self, user_id: UserId) -> RiderProfile | None: ...


class MenuRepository(Protocol):
    async def get_items(
        self,
        restaurant_id: RestaurantId,
        item_ids: list[MenuItemId],
    ) -> dict[MenuItemId, MenuItem]: ...


class DeviceTokenStore(Protocol):
    async def get_push_token(self, user_id: UserId) -> str | None: ...

    async def save_push_token(self, user_id: UserId, token: str) -> bool: ...
