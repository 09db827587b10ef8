from __future__ import annotations

import logging

from courier.application.metrics.notifications import set_connection_count
from courier.application.ports.transport import RealtimeConnection
from courier.domain.common.ids import UserId
from courier.domain.party.entities import Role

logger = logging.getLogger(__name__)


class ConnectionRegistry:
    """Maps authenticated parties to their live connection, per process.

    Every method runs without suspending, so on a single event loop each call
    is atomic with respect to other sessions. State is lost on restart and is
    not shared between worker processes.
    """

    def __init__(self) -> None:
        self._by_role: dict[Role, dict[UserId, RealtimeConnection]] = {role: {} for role in Role}
        self._by_party: dict[UserId, RealtimeConnection] = {}

    def register(self, party_id: UserId, role: Role, handle: RealtimeConnection) -> None:
        # A handle re-authenticating as someone else must not keep its old identity.
        self._drop_handle(handle)

        displaced = self._by_party.get(party_id)
        if displaced is not None:
            for connections in self._by_role.values():
                connections.pop(party_id, None)

        self._by_party[party_id] = handle
        self._by_role[role][party_id] = handle
        self._publish_counts()
        logger.info(
            "realtime_party_registered",
            extra={
                "party_id": party_id,
                "role": role.value,
                "connection_id": handle.connection_id,
                "displaced_connection_id": displaced.connection_id if displaced else None,
            },
        )

    def lookup(self, party_id: UserId) -> RealtimeConnection | None:
        return self._by_party.get(party_id)

    def unregister(self, handle: RealtimeConnection) -> UserId | None:
        party_id = self._drop_handle(handle)
        if party_id is not None:
            logger.info(
                "realtime_party_unregistered",
                extra={"party_id": party_id, "connection_id": handle.connection_id},
            )
        return party_id

    def handles_for_role(self, role: Role) -> list[tuple[UserId, RealtimeConnection]]:
        return list(self._by_role[role].items())

    def count(self, role: Role | None = None) -> int:
        if role is None:
            return len(self._by_party)
        return len(self._by_role[role])

    def _drop_handle(self, handle: RealtimeConnection) -> UserId | None:
        party_id: UserId | None = None
        for candidate, connection in list(self._by_party.items()):
            if connection is handle:
                party_id = candidate
                del self._by_party[candidate]
                break
        if party_id is None:
            return None

        for connections in self._by_role.values():
            if connections.get(party_id) is handle:
                del connections[party_id]
        self._publish_counts()
        return party_id

    def _publish_counts(self) -> None:
        for role, connections in self._by_role.items():
            set_connection_count(role.value, len(connections))
