from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from courier.domain.common.ids import RestaurantId, RiderId, UserId


class Role(str, Enum):
    USER = "USER"
    RESTAURANT = "RESTAURANT"
    RIDER = "RIDER"


@dataclass(frozen=True)
class Actor:
    """An authenticated caller: the user id from the credential plus its role."""

    user_id: UserId
    role: Role


@dataclass(frozen=True)
class UserProfile:
    user_id: UserId
    name: str
    email: str | None = None


@dataclass(frozen=True)
class RestaurantProfile:
    restaurant_id: RestaurantId
    owner_id: UserId
    name: str


@dataclass(frozen=True)
class RiderProfile:
    rider_id: RiderId
    user_id: UserId
