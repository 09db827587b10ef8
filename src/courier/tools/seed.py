from __future__ import annotations

import asyncio
import os

from sqlalchemy import inspect
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from courier.domain.party.entities import Role
from courier.infrastructure.auth.jwt_verifier import issue_token
from courier.infrastructure.db.models.menu import MenuItemModel
from courier.infrastructure.db.models.party import RestaurantModel, RiderModel, UserModel
from courier.infrastructure.db.session import get_engine

USERS = [
    {"id": "usr_001", "name": "Ada Customer", "email": "ada@example.com", "role": Role.USER.value},
    {"id": "usr_002", "name": "Bo Owner", "email": "bo@example.com", "role": Role.RESTAURANT.value},
    {"id": "usr_003", "name": "Cy Rider", "email": "cy@example.com", "role": Role.RIDER.value},
]

MENU_ITEMS = [
    {
        "id": "itm_001",
        "restaurant_id": "rst_001",
        "name": "Margherita Pizza",
        "price_cents": 1450,
        "currency": "USD",
        "is_available": True,
    },
    {
        "id": "itm_002",
        "restaurant_id": "rst_001",
        "name": "Chicken Alfredo",
        "price_cents": 1690,
        "currency": "USD",
        "is_available": True,
    },
    {
        "id": "itm_003",
        "restaurant_id": "rst_001",
        "name": "Tiramisu",
        "price_cents": 850,
        "currency": "USD",
        "is_available": False,
    },
]


async def _upsert_all(session: AsyncSession) -> None:
    for user in USERS:
        await session.execute(
            insert(UserModel)
            .values(**user)
            .on_conflict_do_update(
                index_elements=[UserModel.id],
                set_={"name": user["name"], "email": user["email"], "role": user["role"]},
            )
        )

    await session.execute(
        insert(RestaurantModel)
        .values(id="rst_001", user_id="usr_002", name="Downtown Test Kitchen")
        .on_conflict_do_update(
            index_elements=[RestaurantModel.id],
            set_={"user_id": "usr_002", "name": "Downtown Test Kitchen"},
        )
    )
    await session.execute(
        insert(RiderModel)
        .values(id="rdr_001", user_id="usr_003")
        .on_conflict_do_update(index_elements=[RiderModel.id], set_={"user_id": "usr_003"})
    )

    for item in MENU_ITEMS:
        await session.execute(
            insert(MenuItemModel)
            .values(**item)
            .on_conflict_do_update(
                index_elements=[MenuItemModel.id],
                set_={key: value for key, value in item.items() if key != "id"},
            )
        )


async def seed() -> None:
    engine = get_engine()
    async with engine.connect() as connection:
        table_names = await connection.run_sync(
            lambda sync_connection: set(inspect(sync_connection).get_table_names(schema="public"))
        )
    required_tables = {"users", "restaurants", "riders", "menu_items"}
    if not required_tables.issubset(table_names):
        print("no schema yet")
        return

    async with AsyncSession(engine) as session:
        await _upsert_all(session)
        await session.commit()
    print("seed complete")

    secret = os.getenv("JWT_SECRET")
    if secret:
        for user in USERS:
            token = issue_token(secret, user["id"], Role(user["role"]), email=user["email"])
            print(f"{user['role']:<10} {user['id']}  {token}")


def main() -> None:
    asyncio.run(seed())


if __name__ == "__main__":
    main()
