from __future__ import annotations

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from fakes import FakeConnection

from courier.application.realtime.registry import ConnectionRegistry
from courier.domain.common.ids import UserId
from courier.domain.party.entities import Role


def test_register_and_lookup_party() -> None:
    registry = ConnectionRegistry()
    connection = FakeConnection()

    registry.register(UserId("usr_001"), Role.USER, connection)

    assert registry.lookup(UserId("usr_001")) is connection
    assert registry.count() == 1
    assert registry.count(Role.USER) == 1
    assert registry.count(Role.RIDER) == 0


def test_latest_connection_for_party_wins() -> None:
    registry = ConnectionRegistry()
    first = FakeConnection()
    second = FakeConnection()

    registry.register(UserId("usr_001"), Role.USER, first)
    registry.register(UserId("usr_001"), Role.USER, second)

    assert registry.lookup(UserId("usr_001")) is second
    assert registry.count() == 1

    # The displaced handle disconnecting later must not evict the new one.
    assert registry.unregister(first) is None
    assert registry.lookup(UserId("usr_001")) is second


def test_unregister_removes_party_from_every_index() -> None:
    registry = ConnectionRegistry()
    connection = FakeConnection()
    registry.register(UserId("usr_rider"), Role.RIDER, connection)

    assert registry.unregister(connection) == UserId("usr_rider")
    assert registry.lookup(UserId("usr_rider")) is None
    assert registry.handles_for_role(Role.RIDER) == []
    assert registry.unregister(connection) is None


def test_reauthenticating_handle_drops_previous_identity() -> None:
    registry = ConnectionRegistry()
    connection = FakeConnection()

    registry.register(UserId("usr_001"), Role.USER, connection)
    registry.register(UserId("usr_rider"), Role.RIDER, connection)

    assert registry.lookup(UserId("usr_001")) is None
    assert registry.handles_for_role(Role.USER) == []
    assert registry.handles_for_role(Role.RIDER) == [(UserId("usr_rider"), connection)]
