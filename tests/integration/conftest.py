from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import Iterator

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from courier.infrastructure.db.models.menu import MenuItemModel
from courier.infrastructure.db.models.order import OrderModel  # noqa: F401
from courier.infrastructure.db.models.party import Base, RestaurantModel, RiderModel, UserModel


async def _prepare(engine: AsyncEngine) -> None:
    async with engine.begin() as connection:
        await connection.run_sync(Base.metadata.create_all)

    async with AsyncSession(engine) as session:
        session.add_all(
            [
                UserModel(id="usr_customer", name="Ada", role="USER"),
                UserModel(id="usr_owner", name="Bo", role="RESTAURANT"),
                UserModel(id="usr_rider", name="Cy", role="RIDER", fcm_token="device-rider"),
                UserModel(id="usr_rider_2", name="Fa", role="RIDER"),
            ]
        )
        await session.flush()
        session.add_all(
            [
                RestaurantModel(id="rst_001", user_id="usr_owner", name="Downtown Kitchen"),
                RiderModel(id="rdr_001", user_id="usr_rider"),
                RiderModel(id="rdr_002", user_id="usr_rider_2"),
            ]
        )
        await session.flush()
        session.add_all(
            [
                MenuItemModel(
                    id="itm_001",
                    restaurant_id="rst_001",
                    name="Margherita Pizza",
                    price_cents=1450,
                    currency="USD",
                    is_available=True,
                ),
                MenuItemModel(
                    id="itm_003",
                    restaurant_id="rst_001",
                    name="Tiramisu",
                    price_cents=850,
                    currency="USD",
                    is_available=False,
                ),
            ]
        )
        await session.commit()


@pytest.fixture
def sessions(tmp_path: Path) -> Iterator[async_sessionmaker[AsyncSession]]:
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'courier.db'}", poolclass=NullPool)
    asyncio.run(_prepare(engine))
    yield async_sessionmaker(engine, expire_on_commit=False)
    asyncio.run(engine.dispose())
