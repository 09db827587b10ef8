from __future__ import annotations

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from courier.application.ports.repositories import DeviceTokenStore, PartyDirectory
from courier.domain.common.ids import RestaurantId, RiderId, UserId
from courier.domain.party.entities import RestaurantProfile, RiderProfile, UserProfile
from courier.infrastructure.db.models.party import RestaurantModel, RiderModel, UserModel
from courier.infrastructure.db.session import session_factory


class SqlAlchemyPartyDirectory(PartyDirectory):
    def __init__(self, sessions: async_sessionmaker[AsyncSession] | None = None) -> None:
        self._sessions = sessions or session_factory()

    async def get_user(self, user_id: UserId) -> UserProfile | None:
        async with self._sessions() as session:
            model = await session.get(UserModel, str(user_id))
        if model is None:
            return None
        return UserProfile(user_id=UserId(model.id), name=model.name, email=model.email)

    async def get_restaurant(self, restaurant_id: RestaurantId) -> RestaurantProfile | None:
        async with self._sessions() as session:
            model = await session.get(RestaurantModel, str(restaurant_id))
        return _restaurant(model) if model is not None else None

    async def restaurant_by_owner(self, owner_id: UserId) -> RestaurantProfile | None:
        statement = select(RestaurantModel).where(RestaurantModel.user_id == str(owner_id)).limit(1)
        async with self._sessions() as session:
            model = (await session.execute(statement)).scalar_one_or_none()
        return _restaurant(model) if model is not None else None

    async def get_rider(self, rider_id: RiderId) -> RiderProfile | None:
        async with self._sessions() as session:
            model = await session.get(RiderModel, str(rider_id))
        return _rider(model) if model is not None else None

    async def rider_by_user(self, user_id: UserId) -> RiderProfile | None:
        statement = select(RiderModel).where(RiderModel.user_id == str(user_id)).limit(1)
        async with self._sessions() as session:
            model = (await session.execute(statement)).scalar_one_or_none()
        return _rider(model) if model is not None else None


class SqlAlchemyDeviceTokenStore(DeviceTokenStore):
    """Push tokens live on the user row; saving replaces any previous token."""

    def __init__(self, sessions: async_sessionmaker[AsyncSession] | None = None) -> None:
        self._sessions = sessions or session_factory()

    async def get_push_token(self, user_id: UserId) -> str | None:
        statement = select(UserModel.fcm_token).where(UserModel.id == str(user_id))
        async with self._sessions() as session:
            return (await session.execute(statement)).scalar_one_or_none()

    async def save_push_token(self, user_id: UserId, token: str) -> bool:
        statement = update(UserModel).where(UserModel.id == str(user_id)).values(fcm_token=token)
        async with self._sessions() as session:
            result = await session.execute(statement)
            if result.rowcount != 1:
                await session.rollback()
                return False
            await session.commit()
        return True


def _restaurant(model: RestaurantModel) -> RestaurantProfile:
    return RestaurantProfile(
        restaurant_id=RestaurantId(model.id),
        owner_id=UserId(model.user_id),
        name=model.name,
    )


def _rider(model: RiderModel) -> RiderProfile:
    return RiderProfile(rider_id=RiderId(model.id), user_id=UserId(model.user_id))
