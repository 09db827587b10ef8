from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol

from courier.domain.party.entities import Actor


@dataclass(frozen=True)
class VerifiedClaims:
    actor: Actor
    email: str | None = None
    raw: dict[str, Any] = field(default_factory=dict)


class TokenVerifier(Protocol):
    def verify(self, token: str) -> VerifiedClaims: ...


class InvalidTokenError(Exception):
    pass
