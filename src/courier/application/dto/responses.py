from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class MoneyResponse(BaseModel):
    amountCents: int
    currency: str


class OrderItemResponse(BaseModel):
    itemId: str
    menuItemId: str
    name: str
    quantity: int
    unitPrice: MoneyResponse
    lineTotal: MoneyResponse


class OrderResponse(BaseModel):
    orderId: str
    customerId: str
    restaurantId: str
    riderId: str | None = None
    status: str
    paymentStatus: str
    paymentReference: str | None = None
    items: list[OrderItemResponse] = Field(default_factory=list)
    total: MoneyResponse
    createdAt: datetime


class OrdersResponse(BaseModel):
    orders: list[OrderResponse] = Field(default_factory=list)


class MessageResponse(BaseModel):
    message: str
