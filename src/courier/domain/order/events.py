from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from courier.domain.common.ids import UserId
from courier.domain.party.entities import Role


class OrderEventKind(str, Enum):
    NEW_ORDER = "new_order"
    ORDER_UPDATED = "order_updated"
    NEW_ORDER_AVAILABLE = "new_order_available"
    ORDER_ASSIGNED = "order_assigned"


@dataclass(frozen=True)
class NotificationEvent:
    target_party_id: UserId
    role: Role
    kind: OrderEventKind
    payload: dict[str, Any] = field(default_factory=dict)
