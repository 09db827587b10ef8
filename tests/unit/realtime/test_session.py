from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from fakes import CUSTOMER, RIDER, FakeConnection, FakeTokenVerifier

from courier.application.realtime.registry import ConnectionRegistry
from courier.application.realtime.session import (
    POLICY_VIOLATION_CLOSE_CODE,
    RealtimeSession,
    SessionState,
)


def _session(
    connection: FakeConnection,
    registry: ConnectionRegistry,
    timeout: float = 5.0,
) -> RealtimeSession:
    return RealtimeSession(
        connection=connection,
        registry=registry,
        verifier=FakeTokenVerifier(),
        auth_timeout_seconds=timeout,
    )


def _frame(event: str, data: object) -> str:
    return json.dumps({"event": event, "data": data})


def test_open_sends_welcome_with_client_id() -> None:
    async def scenario() -> FakeConnection:
        connection = FakeConnection()
        session = _session(connection, ConnectionRegistry())
        await session.open()
        await session.close()
        return connection

    connection = asyncio.run(scenario())

    welcome = connection.last("welcome")
    assert welcome["clientId"] == connection.connection_id
    assert welcome["message"] == "Connected! Send auth message to authenticate."
    assert "timestamp" in welcome


def test_valid_token_registers_party() -> None:
    registry = ConnectionRegistry()
    connection = FakeConnection()

    async def scenario() -> RealtimeSession:
        session = _session(connection, registry)
        await session.open()
        await session.handle_text(_frame("auth", {"token": "token-rider"}))
        return session

    session = asyncio.run(scenario())

    assert session.state == SessionState.AUTHENTICATED
    assert registry.lookup(RIDER.user_id) is connection
    assert connection.last("auth_result") == {
        "success": True,
        "user": {"id": RIDER.user_id, "role": "RIDER"},
        "message": "Authentication successful",
    }


def test_failed_auth_keeps_session_open_for_retry() -> None:
    registry = ConnectionRegistry()
    connection = FakeConnection()

    async def scenario() -> RealtimeSession:
        session = _session(connection, registry)
        await session.open()
        await session.handle_text(_frame("auth", {}))
        await session.handle_text(_frame("auth", "forged"))
        assert session.state == SessionState.CONNECTED
        await session.handle_text(_frame("auth", [{"token": "token-customer"}]))
        return session

    session = asyncio.run(scenario())

    results = [data for event, data in connection.sent if event == "auth_result"]
    assert results[0] == {"success": False, "error": "No token"}
    assert results[1]["success"] is False
    assert results[2]["success"] is True
    assert session.state == SessionState.AUTHENTICATED
    assert registry.lookup(CUSTOMER.user_id) is connection


def test_unauthenticated_connection_is_dropped_after_window() -> None:
    registry = ConnectionRegistry()
    connection = FakeConnection()

    async def scenario() -> RealtimeSession:
        session = _session(connection, registry, timeout=0.05)
        await session.open()
        await asyncio.wait_for(session.wait_closed(), timeout=2.0)
        return session

    session = asyncio.run(scenario())

    assert session.state == SessionState.CLOSED
    assert connection.last("timeout") == {"message": "Authentication timeout"}
    assert connection.closed_with == POLICY_VIOLATION_CLOSE_CODE
    assert registry.count() == 0


def test_authenticated_connection_survives_window() -> None:
    connection = FakeConnection()

    async def scenario() -> RealtimeSession:
        session = _session(connection, ConnectionRegistry(), timeout=0.05)
        await session.open()
        await session.handle_text(_frame("auth", "token-customer"))
        await asyncio.sleep(0.1)
        return session

    session = asyncio.run(scenario())

    assert session.state == SessionState.AUTHENTICATED
    assert "timeout" not in connection.events()
    assert connection.closed_with is None


def test_echo_replies_and_unknown_events_are_ignored() -> None:
    connection = FakeConnection()

    async def scenario() -> None:
        session = _session(connection, ConnectionRegistry())
        await session.open()
        await session.handle_text(_frame("echo", {"ping": 1}))
        await session.handle_text(_frame("dance", {}))
        await session.handle_text("garbage")
        await session.close()

    asyncio.run(scenario())

    assert connection.events() == ["welcome", "echo_response"]
    reply = connection.last("echo_response")
    assert reply["received"] == {"ping": 1}
    assert reply["status"] == "success"


def test_close_unregisters_and_ignores_later_frames() -> None:
    registry = ConnectionRegistry()
    connection = FakeConnection()

    async def scenario() -> None:
        session = _session(connection, registry)
        await session.open()
        await session.handle_text(_frame("auth", "token-customer"))
        await session.close()
        await session.close()
        await session.handle_text(_frame("echo", "late"))

    asyncio.run(scenario())

    assert registry.lookup(CUSTOMER.user_id) is None
    assert "echo_response" not in connection.events()


class SlowTimeoutConnection(FakeConnection):
    async def send(self, event: str, data: object) -> None:
        if event == "timeout":
            await asyncio.sleep(0.05)
        await super().send(event, data)


def test_auth_arriving_while_timeout_is_sent_is_ignored() -> None:
    registry = ConnectionRegistry()
    connection = SlowTimeoutConnection()

    async def scenario() -> RealtimeSession:
        session = _session(connection, registry, timeout=0.01)
        await session.open()
        await asyncio.sleep(0.03)
        await session.handle_text(_frame("auth", {"token": "token-customer"}))
        await asyncio.wait_for(session.wait_closed(), timeout=2.0)
        return session

    session = asyncio.run(scenario())

    assert connection.events() == ["welcome", "timeout"]
    assert connection.closed_with == POLICY_VIOLATION_CLOSE_CODE
    assert session.state == SessionState.CLOSED
    assert registry.lookup(CUSTOMER.user_id) is None
