from __future__ import annotations

import sys
from pathlib import Path

import jwt
import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from courier.application.ports.auth import InvalidTokenError
from courier.domain.party.entities import Role
from courier.infrastructure.auth.jwt_verifier import JwtTokenVerifier, issue_token

SECRET = "test-secret-with-enough-length-for-hs256"


def test_issued_token_round_trips_to_actor() -> None:
    token = issue_token(SECRET, "usr_001", Role.RESTAURANT, email="bo@example.com")

    claims = JwtTokenVerifier(SECRET).verify(token)

    assert claims.actor.user_id == "usr_001"
    assert claims.actor.role == Role.RESTAURANT
    assert claims.email == "bo@example.com"


@pytest.mark.parametrize("subject_claim", ["id", "userId"])
def test_alternative_subject_claims_are_accepted(subject_claim: str) -> None:
    token = jwt.encode({subject_claim: "usr_042", "role": "rider"}, SECRET, algorithm="HS256")

    claims = JwtTokenVerifier(SECRET).verify(token)

    assert claims.actor.user_id == "usr_042"
    assert claims.actor.role == Role.RIDER


@pytest.mark.parametrize(
    "token",
    [
        "not-a-jwt",
        jwt.encode({"sub": "usr_001", "role": "USER"}, "another-secret-of-sufficient-size", algorithm="HS256"),
        jwt.encode({"role": "USER"}, SECRET, algorithm="HS256"),
        jwt.encode({"sub": "usr_001", "role": "ADMIN"}, SECRET, algorithm="HS256"),
        jwt.encode({"sub": "usr_001", "role": "USER", "exp": 1}, SECRET, algorithm="HS256"),
    ],
)
def test_invalid_tokens_are_rejected(token: str) -> None:
    with pytest.raises(InvalidTokenError):
        JwtTokenVerifier(SECRET).verify(token)


def test_missing_secret_is_a_configuration_error(monkeypatch) -> None:
    monkeypatch.delenv("JWT_SECRET", raising=False)

    with pytest.raises(RuntimeError):
        JwtTokenVerifier()
