from __future__ import annotations

from datetime import timezone

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload

from courier.application.ports.repositories import OrderRepository, OrderUpdateFilter
from courier.domain.common.ids import (
    MenuItemId,
    OrderId,
    OrderItemId,
    RestaurantId,
    RiderId,
    UserId,
)
from courier.domain.common.money import Money
from courier.domain.order.entities import Order, OrderItem, OrderStatus, PaymentStatus
from courier.infrastructure.db.models.order import OrderItemModel, OrderModel
from courier.infrastructure.db.session import session_factory


class SqlAlchemyOrderRepository(OrderRepository):
    def __init__(self, sessions: async_sessionmaker[AsyncSession] | None = None) -> None:
        self._sessions = sessions or session_factory()

    async def create(self, order: Order) -> Order:
        async with self._sessions() as session:
            session.add(self._to_model(order))
            await session.commit()

        created = await self.find_by_id(order.order_id)
        if created is None:
            raise RuntimeError("created order not found")
        return created

    async def find_by_id(self, order_id: OrderId) -> Order | None:
        statement = (
            select(OrderModel)
            .options(selectinload(OrderModel.items))
            .where(OrderModel.id == str(order_id))
            .limit(1)
        )
        async with self._sessions() as session:
            model = (await session.execute(statement)).scalar_one_or_none()

        if model is None:
            return None
        return self._to_domain(model)

    async def update_status(
        self,
        order_id: OrderId,
        new_status: OrderStatus,
        where: OrderUpdateFilter,
        rider_id: RiderId | None = None,
    ) -> Order | None:
        conditions = [OrderModel.id == str(order_id)]
        if where.statuses:
            conditions.append(OrderModel.status.in_([status.value for status in where.statuses]))
        if where.restaurant_id is not None:
            conditions.append(OrderModel.restaurant_id == str(where.restaurant_id))
        if where.require_unassigned_rider:
            conditions.append(OrderModel.rider_id.is_(None))

        values: dict[str, str] = {"status": new_status.value}
        if rider_id is not None:
            values["rider_id"] = str(rider_id)

        statement = update(OrderModel).where(*conditions).values(**values)
        async with self._sessions() as session:
            result = await session.execute(statement)
            if result.rowcount != 1:
                await session.rollback()
                return None
            await session.commit()

        return await self.find_by_id(order_id)

    async def list_for_customer(self, customer_id: UserId) -> list[Order]:
        return await self._list(OrderModel.user_id == str(customer_id))

    async def list_for_restaurant(self, restaurant_id: RestaurantId) -> list[Order]:
        return await self._list(OrderModel.restaurant_id == str(restaurant_id))

    async def list_for_rider(self, rider_id: RiderId) -> list[Order]:
        return await self._list(OrderModel.rider_id == str(rider_id))

    async def _list(self, condition) -> list[Order]:
        statement = (
            select(OrderModel)
            .options(selectinload(OrderModel.items))
            .where(condition)
            .order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
        )
        async with self._sessions() as session:
            models = list((await session.execute(statement)).scalars().all())
        return [self._to_domain(model) for model in models]

    def _to_model(self, order: Order) -> OrderModel:
        order_model = OrderModel(
            id=str(order.order_id),
            user_id=str(order.customer_id),
            restaurant_id=str(order.restaurant_id),
            rider_id=str(order.rider_id) if order.rider_id is not None else None,
            status=order.status.value,
            payment_status=order.payment_status.value,
            payment_reference=order.payment_reference,
            total_cents=order.total.amount_cents,
            currency=order.total.currency,
            created_at=order.created_at,
        )
        order_model.items = [
            OrderItemModel(
                id=str(item.item_id),
                order_id=str(order.order_id),
                menu_item_id=str(item.menu_item_id),
                name=item.name,
                quantity=item.quantity,
                unit_price_cents=item.unit_price.amount_cents,
                currency=item.unit_price.currency,
            )
            for item in order.items
        ]
        return order_model

    def _to_domain(self, model: OrderModel) -> Order:
        created_at = model.created_at
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)

        items = [
            OrderItem(
                item_id=OrderItemId(item.id),
                menu_item_id=MenuItemId(item.menu_item_id),
                name=item.name,
                quantity=item.quantity,
                unit_price=Money(amount_cents=item.unit_price_cents, currency=item.currency),
            )
            for item in model.items
        ]
        return Order(
            order_id=OrderId(model.id),
            customer_id=UserId(model.user_id),
            restaurant_id=RestaurantId(model.restaurant_id),
            status=OrderStatus(model.status),
            items=items,
            total=Money(amount_cents=model.total_cents, currency=model.currency),
            created_at=created_at,
            rider_id=RiderId(model.rider_id) if model.rider_id is not None else None,
            payment_status=PaymentStatus(model.payment_status),
            payment_reference=model.payment_reference,
        )
