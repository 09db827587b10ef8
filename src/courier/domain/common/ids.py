from __future__ import annotations

from typing import NewType

UserId = NewType("UserId", str)
RestaurantId = NewType("RestaurantId", str)
RiderId = NewType("RiderId", str)
MenuItemId = NewType("MenuItemId", str)
OrderId = NewType("OrderId", str)
OrderItemId = NewType("OrderItemId", str)
