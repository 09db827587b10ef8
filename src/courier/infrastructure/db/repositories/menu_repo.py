from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from courier.application.ports.repositories import MenuRepository
from courier.domain.common.ids import MenuItemId, RestaurantId
from courier.domain.common.money import Money
from courier.domain.menu.entities import MenuItem
from courier.infrastructure.db.models.menu import MenuItemModel
from courier.infrastructure.db.session import session_factory


class SqlAlchemyMenuRepository(MenuRepository):
    def __init__(self, sessions: async_sessionmaker[AsyncSession] | None = None) -> None:
        self._sessions = sessions or session_factory()

    async def get_items(
        self,
        restaurant_id: RestaurantId,
        item_ids: list[MenuItemId],
    ) -> dict[MenuItemId, MenuItem]:
        if not item_ids:
            return {}

        statement = select(MenuItemModel).where(
            MenuItemModel.restaurant_id == str(restaurant_id),
            MenuItemModel.id.in_([str(item_id) for item_id in item_ids]),
        )
        async with self._sessions() as session:
            models = list((await session.execute(statement)).scalars().all())

        return {
            MenuItemId(model.id): MenuItem(
                item_id=MenuItemId(model.id),
                restaurant_id=RestaurantId(model.restaurant_id),
                name=model.name,
                price_money=Money(amount_cents=model.price_cents, currency=model.currency),
                is_available=model.is_available,
            )
            for model in models
        }
