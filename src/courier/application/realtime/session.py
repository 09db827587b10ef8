from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from courier.application.metrics.notifications import record_auth
from courier.application.ports.auth import InvalidTokenError, TokenVerifier
from courier.application.ports.transport import RealtimeConnection
from courier.application.realtime.protocol import (
    AuthMessage,
    EchoMessage,
    InboundMessage,
    parse_frame,
)
from courier.application.realtime.registry import ConnectionRegistry
from courier.domain.common.ids import UserId
from courier.domain.party.entities import Role

logger = logging.getLogger(__name__)

AUTH_TIMEOUT_SECONDS = 10.0
POLICY_VIOLATION_CLOSE_CODE = 1008


class SessionState(str, Enum):
    CONNECTED = "CONNECTED"
    AUTHENTICATED = "AUTHENTICATED"
    CLOSED = "CLOSED"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class RealtimeSession:
    """Per-connection protocol: CONNECTED -> AUTHENTICATED -> CLOSED.

    A connection must present a valid credential within the authentication
    window or it is told so and dropped. Failed attempts inside the window
    leave the session CONNECTED so the client can retry. From the moment the
    window expires, and once CLOSED, the session ignores everything.
    """

    def __init__(
        self,
        connection: RealtimeConnection,
        registry: ConnectionRegistry,
        verifier: TokenVerifier,
        auth_timeout_seconds: float = AUTH_TIMEOUT_SECONDS,
    ) -> None:
        self._connection = connection
        self._registry = registry
        self._verifier = verifier
        self._auth_timeout_seconds = auth_timeout_seconds
        self._timer: asyncio.Task[None] | None = None
        self._closed = asyncio.Event()
        self._expiring = False
        self.state = SessionState.CONNECTED
        self.party_id: UserId | None = None
        self.role: Role | None = None
        self.created_at = datetime.now(timezone.utc)

    @property
    def connection_id(self) -> str:
        return self._connection.connection_id

    async def open(self) -> None:
        logger.info("realtime_connected", extra={"connection_id": self.connection_id})
        await self._emit(
            "welcome",
            {
                "message": "Connected! Send auth message to authenticate.",
                "clientId": self.connection_id,
                "timestamp": _now_iso(),
            },
        )
        self._timer = asyncio.create_task(self._expire_if_unauthenticated())

    async def handle_text(self, raw: str) -> None:
        await self.handle(parse_frame(raw))

    async def handle(self, message: InboundMessage) -> None:
        # Once expiry has begun the session is on its way to CLOSED.
        if self.state == SessionState.CLOSED or self._expiring:
            return

        if isinstance(message, AuthMessage):
            await self._authenticate(message)
        elif isinstance(message, EchoMessage):
            await self._emit(
                "echo_response",
                {"received": message.data, "status": "success", "timestamp": _now_iso()},
            )
        else:
            logger.info(
                "realtime_unknown_event",
                extra={"connection_id": self.connection_id, "event": message.event},
            )

    async def close(self) -> None:
        if self.state == SessionState.CLOSED:
            return
        self.state = SessionState.CLOSED
        if self._timer is not None and self._timer is not asyncio.current_task():
            self._timer.cancel()
        self._registry.unregister(self._connection)
        self._closed.set()
        logger.info(
            "realtime_disconnected",
            extra={"connection_id": self.connection_id, "party_id": self.party_id},
        )

    async def wait_closed(self) -> None:
        await self._closed.wait()

    async def _authenticate(self, message: AuthMessage) -> None:
        if not message.token:
            record_auth("missing_token")
            await self._emit("auth_result", {"success": False, "error": "No token"})
            return

        try:
            claims = self._verifier.verify(message.token)
        except InvalidTokenError as exc:
            record_auth("rejected")
            logger.warning(
                "realtime_auth_failed",
                extra={"connection_id": self.connection_id, "reason": str(exc)},
            )
            await self._emit("auth_result", {"success": False, "error": str(exc)})
            return

        actor = claims.actor
        self._registry.register(actor.user_id, actor.role, self._connection)
        self.state = SessionState.AUTHENTICATED
        self.party_id = actor.user_id
        self.role = actor.role
        if self._timer is not None:
            self._timer.cancel()
        record_auth("accepted")
        await self._emit(
            "auth_result",
            {
                "success": True,
                "user": {"id": actor.user_id, "role": actor.role.value},
                "message": "Authentication successful",
            },
        )

    async def _expire_if_unauthenticated(self) -> None:
        await asyncio.sleep(self._auth_timeout_seconds)
        if self.state != SessionState.CONNECTED:
            return

        self._expiring = True
        logger.info("realtime_auth_timeout", extra={"connection_id": self.connection_id})
        await self._emit("timeout", {"message": "Authentication timeout"})
        try:
            await self._connection.close(
                code=POLICY_VIOLATION_CLOSE_CODE,
                reason="authentication timeout",
            )
        except Exception:
            logger.exception("realtime_close_failed", extra={"connection_id": self.connection_id})
        await self.close()

    async def _emit(self, event: str, data: Any) -> None:
        try:
            await self._connection.send(event, data)
        except Exception:
            logger.warning(
                "realtime_emit_failed",
                extra={"connection_id": self.connection_id, "event": event},
            )
