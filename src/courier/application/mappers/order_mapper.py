from __future__ import annotations

from courier.application.dto.responses import (
    MoneyResponse,
    OrderItemResponse,
    OrderResponse,
    OrdersResponse,
)
from courier.domain.common.money import Money
from courier.domain.order.entities import Order


def _money(value: Money) -> MoneyResponse:
    return MoneyResponse(amountCents=value.amount_cents, currency=value.currency)


def to_order_response(order: Order) -> OrderResponse:
    return OrderResponse(
        orderId=str(order.order_id),
        customerId=str(order.customer_id),
        restaurantId=str(order.restaurant_id),
        riderId=str(order.rider_id) if order.rider_id is not None else None,
        status=order.status.value,
        paymentStatus=order.payment_status.value,
        paymentReference=order.payment_reference,
        items=[
            OrderItemResponse(
                itemId=str(item.item_id),
                menuItemId=str(item.menu_item_id),
                name=item.name,
                quantity=item.quantity,
                unitPrice=_money(item.unit_price),
                lineTotal=_money(item.line_total),
            )
            for item in order.items
        ],
        total=_money(order.total),
        createdAt=order.created_at,
    )


def to_orders_response(orders: list[Order]) -> OrdersResponse:
    return OrdersResponse(orders=[to_order_response(order) for order in orders])
