from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Union

AUTH_EVENT = "auth"
ECHO_EVENT = "echo"


@dataclass(frozen=True)
class AuthMessage:
    token: str | None


@dataclass(frozen=True)
class EchoMessage:
    data: Any


@dataclass(frozen=True)
class UnknownMessage:
    event: str | None
    data: Any


InboundMessage = Union[AuthMessage, EchoMessage, UnknownMessage]


def extract_token(data: Any) -> str | None:
    """Accept a bare token, ``{"token": ...}`` or ``[{"token": ...}]``."""
    if isinstance(data, str):
        return data or None
    if isinstance(data, dict):
        token = data.get("token")
        return token if isinstance(token, str) and token else None
    if isinstance(data, list) and data and isinstance(data[0], dict):
        return extract_token(data[0])
    return None


def _route(event: str, data: Any) -> InboundMessage | None:
    if event == AUTH_EVENT:
        return AuthMessage(token=extract_token(data))
    if event == ECHO_EVENT:
        return EchoMessage(data=data)
    return None


def resolve_message(event: str | None, data: Any) -> InboundMessage:
    if event is not None:
        routed = _route(event, data)
        if routed is not None:
            return routed

    # Some clients (Postman among them) wrap the real event as {"event", "data"}
    # inside the payload of a generic frame. Unwrap exactly one level.
    if isinstance(data, dict) and isinstance(data.get("event"), str) and "data" in data:
        routed = _route(data["event"], data["data"])
        if routed is not None:
            return routed

    return UnknownMessage(event=event, data=data)


def parse_frame(raw: str) -> InboundMessage:
    try:
        frame = json.loads(raw)
    except ValueError:
        return UnknownMessage(event=None, data=raw)

    if not isinstance(frame, dict):
        return UnknownMessage(event=None, data=frame)

    event = frame.get("event")
    if not isinstance(event, str):
        return UnknownMessage(event=None, data=frame)
    return resolve_message(event, frame.get("data"))
