from __future__ import annotations

import os
from typing import Any

import jwt

from courier.application.ports.auth import InvalidTokenError, TokenVerifier, VerifiedClaims
from courier.domain.common.ids import UserId
from courier.domain.party.entities import Actor, Role

_ALGORITHM = "HS256"
_SUBJECT_CLAIMS = ("sub", "id", "userId")


def _jwt_secret() -> str:
    secret = os.getenv("JWT_SECRET")
    if not secret:
        raise RuntimeError("JWT_SECRET is not set")
    return secret


class JwtTokenVerifier(TokenVerifier):
    """Verifies HS256 bearer tokens signed with the shared secret.

    The subject may arrive as ``sub``, ``id`` or ``userId`` depending on the
    issuer; ``role`` must name one of the known roles.
    """

    def __init__(self, secret: str | None = None) -> None:
        self._secret = secret or _jwt_secret()

    def verify(self, token: str) -> VerifiedClaims:
        try:
            claims: dict[str, Any] = jwt.decode(token, self._secret, algorithms=[_ALGORITHM])
        except jwt.PyJWTError as exc:
            raise InvalidTokenError(str(exc)) from exc

        subject = next(
            (claims[key] for key in _SUBJECT_CLAIMS if claims.get(key) not in (None, "")),
            None,
        )
        if subject is None:
            raise InvalidTokenError("token has no subject")

        try:
            role = Role(str(claims.get("role", "")).upper())
        except ValueError as exc:
            raise InvalidTokenError(f"unknown role: {claims.get('role')!r}") from exc

        email = claims.get("email")
        return VerifiedClaims(
            actor=Actor(user_id=UserId(str(subject)), role=role),
            email=str(email) if email else None,
            raw=claims,
        )


def issue_token(
    secret: str,
    user_id: str,
    role: Role,
    email: str | None = None,
    **extra: Any,
) -> str:
    """Sign a token in the shape the verifier accepts. Used by seed data and tests."""
    claims: dict[str, Any] = {"sub": user_id, "role": role.value, **extra}
    if email is not None:
        claims["email"] = email
    return jwt.encode(claims, secret, algorithm=_ALGORITHM)
