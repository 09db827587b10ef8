from __future__ import annotations

import asyncio
import logging
from contextlib import suppress

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from courier.api.services import AppServices, connection_services
from courier.api.ws.connection import WebSocketConnection
from courier.application.realtime.session import RealtimeSession

router = APIRouter()
logger = logging.getLogger(__name__)


async def _read_frames(websocket: WebSocket, session: RealtimeSession) -> None:
    while True:
        raw = await websocket.receive_text()
        await session.handle_text(raw)


@router.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket) -> None:
    services: AppServices = connection_services(websocket)
    await websocket.accept()

    connection = WebSocketConnection(websocket)
    session = RealtimeSession(
        connection=connection,
        registry=services.registry,
        verifier=services.verifier,
        auth_timeout_seconds=services.auth_timeout_seconds,
    )
    await session.open()

    reader = asyncio.create_task(_read_frames(websocket, session))
    closed = asyncio.create_task(session.wait_closed())
    try:
        done, _ = await asyncio.wait({reader, closed}, return_when=asyncio.FIRST_COMPLETED)
        if reader in done and not reader.cancelled():
            error = reader.exception()
            if error is not None and not isinstance(error, WebSocketDisconnect):
                logger.error(
                    "ws_connection_error",
                    exc_info=error,
                    extra={"connection_id": connection.connection_id},
                )
    finally:
        for task in (reader, closed):
            if task.done():
                continue
            task.cancel()
            with suppress(asyncio.CancelledError):
                await task
        await session.close()
