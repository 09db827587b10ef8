from __future__ import annotations

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from courier.api.services import AppServices, get_services
from courier.application.ports.auth import InvalidTokenError
from courier.application.use_cases.errors import OrderAccessForbiddenError
from courier.domain.party.entities import Actor, Role

_bearer = HTTPBearer(auto_error=False)


class AuthenticationRequiredError(Exception):
    pass


def current_actor(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
    services: AppServices = Depends(get_services),
) -> Actor:
    if credentials is None or not credentials.credentials:
        raise AuthenticationRequiredError("missing bearer token")
    try:
        return services.verifier.verify(credentials.credentials).actor
    except InvalidTokenError as exc:
        raise AuthenticationRequiredError("invalid bearer token") from exc


def require_role(*roles: Role):
    allowed = frozenset(roles)

    def dependency(actor: Actor = Depends(current_actor)) -> Actor:
        if actor.role not in allowed:
            raise OrderAccessForbiddenError(
                f"role {actor.role.value} may not perform this action"
            )
        return actor

    return dependency
