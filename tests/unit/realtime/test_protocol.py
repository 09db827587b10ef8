from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from courier.application.realtime.protocol import (
    AuthMessage,
    EchoMessage,
    UnknownMessage,
    extract_token,
    parse_frame,
)


@pytest.mark.parametrize(
    "data",
    ["abc", {"token": "abc"}, [{"token": "abc"}]],
)
def test_extract_token_accepts_supported_shapes(data: object) -> None:
    assert extract_token(data) == "abc"


@pytest.mark.parametrize("data", [None, "", {}, {"token": 5}, [], ["abc"], 42])
def test_extract_token_returns_none_for_anything_else(data: object) -> None:
    assert extract_token(data) is None


def test_parse_auth_and_echo_frames() -> None:
    assert parse_frame(json.dumps({"event": "auth", "data": {"token": "t"}})) == AuthMessage(token="t")
    assert parse_frame(json.dumps({"event": "auth", "data": {}})) == AuthMessage(token=None)
    assert parse_frame(json.dumps({"event": "echo", "data": {"hi": 1}})) == EchoMessage(data={"hi": 1})


def test_parse_unwraps_one_level_of_nested_envelope() -> None:
    raw = json.dumps({"event": "message", "data": {"event": "auth", "data": "t"}})

    assert parse_frame(raw) == AuthMessage(token="t")


def test_parse_does_not_unwrap_twice() -> None:
    raw = json.dumps(
        {"event": "message", "data": {"event": "wrapper", "data": {"event": "auth", "data": "t"}}}
    )

    message = parse_frame(raw)

    assert isinstance(message, UnknownMessage)
    assert message.event == "message"


@pytest.mark.parametrize("raw", ["not json", "[1, 2]", json.dumps({"data": "x"})])
def test_malformed_frames_become_unknown(raw: str) -> None:
    assert isinstance(parse_frame(raw), UnknownMessage)
