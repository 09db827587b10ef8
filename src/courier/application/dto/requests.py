from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from courier.domain.order.entities import OrderStatus


def _to_camel(value: str) -> str:
    parts = value.split("_")
    return parts[0] + "".join(part.capitalize() for part in parts[1:])


class CamelBaseModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=_to_camel,
        populate_by_name=True,
    )


class CreateOrderItemRequest(CamelBaseModel):
    item_id: str
    quantity: int = Field(ge=1)


class CreateOrderRequest(CamelBaseModel):
    restaurant_id: str
    items: list[CreateOrderItemRequest] = Field(min_length=1)
    total_amount: int | None = Field(default=None, ge=0)


class UpdateOrderStatusRequest(CamelBaseModel):
    status: OrderStatus


class SaveDeviceTokenRequest(CamelBaseModel):
    fcm_token: str = Field(min_length=1)
