from __future__ import annotations

from dataclasses import dataclass

from courier.domain.common.ids import MenuItemId, RestaurantId
from courier.domain.common.money import Money


@dataclass(frozen=True)
class MenuItem:
    item_id: MenuItemId
    restaurant_id: RestaurantId
    name: str
    price_money: Money
    is_available: bool

    def __post_init__(self) -> None:
        if not self.name.strip():
            raise ValueError("name must be non-empty")
