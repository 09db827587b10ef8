from __future__ import annotations

from enum import Enum
from typing import Awaitable, Callable

from courier.application.ports.repositories import PartyDirectory
from courier.application.use_cases.errors import OrderAccessForbiddenError
from courier.domain.order.entities import Order
from courier.domain.party.entities import Actor, Role


class OrderOperation(str, Enum):
    VIEW = "view"
    UPDATE_STATUS = "update_status"
    CANCEL = "cancel"


OwnershipCheck = Callable[[Actor, Order, PartyDirectory], Awaitable[bool]]


async def is_customer(actor: Actor, order: Order, directory: PartyDirectory) -> bool:
    return order.customer_id == actor.user_id


async def owns_restaurant(actor: Actor, order: Order, directory: PartyDirectory) -> bool:
    restaurant = await directory.restaurant_by_owner(actor.user_id)
    return restaurant is not None and restaurant.restaurant_id == order.restaurant_id


async def is_assigned_rider(actor: Actor, order: Order, directory: PartyDirectory) -> bool:
    if order.rider_id is None:
        return False
    rider = await directory.rider_by_user(actor.user_id)
    return rider is not None and rider.rider_id == order.rider_id


# Pairs without an entry are denied.
AUTHORIZATION_RULES: dict[tuple[OrderOperation, Role], OwnershipCheck] = {
    (OrderOperation.VIEW, Role.USER): is_customer,
    (OrderOperation.VIEW, Role.RESTAURANT): owns_restaurant,
    (OrderOperation.VIEW, Role.RIDER): is_assigned_rider,
    (OrderOperation.UPDATE_STATUS, Role.USER): is_customer,
    (OrderOperation.UPDATE_STATUS, Role.RESTAURANT): owns_restaurant,
    (OrderOperation.UPDATE_STATUS, Role.RIDER): is_assigned_rider,
    (OrderOperation.CANCEL, Role.USER): is_customer,
    (OrderOperation.CANCEL, Role.RESTAURANT): owns_restaurant,
}

_DENIAL_MESSAGES: dict[Role, str] = {
    Role.USER: "you can only {verb} your own orders",
    Role.RESTAURANT: "you can only {verb} orders from your restaurant",
    Role.RIDER: "you can only {verb} orders assigned to you",
}

_VERBS: dict[OrderOperation, str] = {
    OrderOperation.VIEW: "view",
    OrderOperation.UPDATE_STATUS: "update",
    OrderOperation.CANCEL: "cancel",
}


async def authorize(
    operation: OrderOperation,
    actor: Actor,
    order: Order,
    directory: PartyDirectory,
) -> None:
    check = AUTHORIZATION_RULES.get((operation, actor.role))
    if check is None:
        raise OrderAccessForbiddenError(
            f"role {actor.role.value} is not allowed to {_VERBS[operation]} orders"
        )
    if not await check(actor, order, directory):
        raise OrderAccessForbiddenError(
            _DENIAL_MESSAGES[actor.role].format(verb=_VERBS[operation])
        )
