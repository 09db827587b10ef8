from __future__ import annotations

import os
from dataclasses import dataclass, field

from fastapi import Request
from starlette.requests import HTTPConnection

from courier.application.notifications.dispatcher import SEND_TIMEOUT_SECONDS, NotificationDispatcher
from courier.application.notifications.push_service import PushNotificationService
from courier.application.ports.auth import TokenVerifier
from courier.application.ports.repositories import (
    DeviceTokenStore,
    MenuRepository,
    OrderRepository,
    PartyDirectory,
)
from courier.application.ports.transport import PushProvider
from courier.application.realtime.registry import ConnectionRegistry
from courier.application.realtime.session import AUTH_TIMEOUT_SECONDS
from courier.application.use_cases.fanout import OrderFanout
from courier.infrastructure.auth.jwt_verifier import JwtTokenVerifier
from courier.infrastructure.db.repositories.menu_repo import SqlAlchemyMenuRepository
from courier.infrastructure.db.repositories.order_repo import SqlAlchemyOrderRepository
from courier.infrastructure.db.repositories.party_repo import (
    SqlAlchemyDeviceTokenStore,
    SqlAlchemyPartyDirectory,
)
from courier.infrastructure.db.session import session_factory
from courier.infrastructure.push.providers import build_push_provider


def _seconds_from_env(name: str, default: float) -> float:
    raw_value = os.getenv(name)
    if not raw_value:
        return default
    return float(raw_value)


@dataclass
class AppServices:
    """Process-wide collaborators shared by HTTP routes and realtime sessions."""

    order_repository: OrderRepository
    menu_repository: MenuRepository
    party_directory: PartyDirectory
    token_store: DeviceTokenStore
    push_provider: PushProvider
    verifier: TokenVerifier
    registry: ConnectionRegistry = field(default_factory=ConnectionRegistry)
    auth_timeout_seconds: float = AUTH_TIMEOUT_SECONDS
    send_timeout_seconds: float = SEND_TIMEOUT_SECONDS

    def __post_init__(self) -> None:
        self.push_service = PushNotificationService(self.token_store, self.push_provider)
        self.dispatcher = NotificationDispatcher(
            self.registry,
            self.push_service,
            send_timeout_seconds=self.send_timeout_seconds,
        )
        self.fanout = OrderFanout(self.party_directory, self.dispatcher)


def build_services_from_env() -> AppServices:
    sessions = session_factory()
    return AppServices(
        order_repository=SqlAlchemyOrderRepository(sessions),
        menu_repository=SqlAlchemyMenuRepository(sessions),
        party_directory=SqlAlchemyPartyDirectory(sessions),
        token_store=SqlAlchemyDeviceTokenStore(sessions),
        push_provider=build_push_provider(),
        verifier=JwtTokenVerifier(),
        auth_timeout_seconds=_seconds_from_env("WS_AUTH_TIMEOUT_SECONDS", AUTH_TIMEOUT_SECONDS),
        send_timeout_seconds=_seconds_from_env("WS_SEND_TIMEOUT_SECONDS", SEND_TIMEOUT_SECONDS),
    )


def get_services(request: Request) -> AppServices:
    return request.app.state.services


def connection_services(connection: HTTPConnection) -> AppServices:
    return connection.app.state.services
