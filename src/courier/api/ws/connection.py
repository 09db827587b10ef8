from __future__ import annotations

import asyncio
from typing import Any
from uuid import uuid4

from fastapi import WebSocket
from starlette.websockets import WebSocketState

from courier.application.mappers.event_envelope import serialize_frame


class WebSocketConnection:
    """Adapts a Starlette websocket to the realtime connection handle."""

    def __init__(self, websocket: WebSocket) -> None:
        self._websocket = websocket
        self._connection_id = uuid4().hex
        self._send_lock = asyncio.Lock()

    @property
    def connection_id(self) -> str:
        return self._connection_id

    async def send(self, event: str, data: Any) -> None:
        async with self._send_lock:
            await self._websocket.send_text(serialize_frame(event, data))

    async def close(self, code: int = 1000, reason: str | None = None) -> None:
        if self._websocket.application_state == WebSocketState.DISCONNECTED:
            return
        async with self._send_lock:
            await self._websocket.close(code=code, reason=reason)
