from __future__ import annotations

import asyncio
import logging
from typing import Any

from courier.application.metrics.notifications import record_realtime_delivery
from courier.application.notifications.push_messages import PushMessage
from courier.application.notifications.push_service import PushNotificationService
from courier.application.ports.transport import RealtimeConnection
from courier.application.realtime.registry import ConnectionRegistry
from courier.domain.common.ids import UserId
from courier.domain.order.events import NotificationEvent, OrderEventKind
from courier.domain.party.entities import Role

logger = logging.getLogger(__name__)

SEND_TIMEOUT_SECONDS = 2.0


class NotificationDispatcher:
    """Delivers order events over live connections with push as the durable path.

    The registry is only read here. Neither channel's failure reaches the
    caller: an order mutation that already committed must not fail because
    a party could not be told about it. Each realtime send is bounded by
    ``send_timeout_seconds`` so a peer that stops reading cannot hold up the
    push or the remaining parties.
    """

    def __init__(
        self,
        registry: ConnectionRegistry,
        push_service: PushNotificationService,
        send_timeout_seconds: float = SEND_TIMEOUT_SECONDS,
    ) -> None:
        self._registry = registry
        self._push_service = push_service
        self._send_timeout_seconds = send_timeout_seconds

    async def notify(
        self,
        party_id: UserId,
        role: Role,
        kind: OrderEventKind,
        payload: dict[str, Any],
        push: PushMessage | None = None,
    ) -> bool:
        event = NotificationEvent(target_party_id=party_id, role=role, kind=kind, payload=payload)
        return await self.dispatch(event, push=push)

    async def dispatch(self, event: NotificationEvent, push: PushMessage | None = None) -> bool:
        delivered = await self._emit(event)
        if push is not None:
            await self._push(event.target_party_id, push)
        return delivered

    async def broadcast(self, role: Role, kind: OrderEventKind, payload: dict[str, Any]) -> int:
        delivered = 0
        for party_id, handle in self._registry.handles_for_role(role):
            if await self._send(party_id, handle, kind.value, payload):
                delivered += 1

        logger.info(
            "realtime_broadcast",
            extra={"role": role.value, "event": kind.value, "delivered": delivered},
        )
        return delivered

    async def _emit(self, event: NotificationEvent) -> bool:
        handle = self._registry.lookup(event.target_party_id)
        if handle is None:
            record_realtime_delivery(event.kind.value, "offline")
            logger.warning(
                "realtime_party_offline",
                extra={
                    "party_id": event.target_party_id,
                    "role": event.role.value,
                    "event": event.kind.value,
                },
            )
            return False

        return await self._send(event.target_party_id, handle, event.kind.value, event.payload)

    async def _send(
        self,
        party_id: UserId,
        handle: RealtimeConnection,
        event: str,
        payload: dict[str, Any],
    ) -> bool:
        try:
            await asyncio.wait_for(handle.send(event, payload), timeout=self._send_timeout_seconds)
        except asyncio.TimeoutError:
            record_realtime_delivery(event, "timeout")
            logger.warning("realtime_emit_timed_out", extra={"party_id": party_id, "event": event})
            return False
        except Exception:
            record_realtime_delivery(event, "failed")
            logger.warning("realtime_emit_failed", extra={"party_id": party_id, "event": event})
            return False

        record_realtime_delivery(event, "delivered")
        return True

    async def _push(self, user_id: UserId, message: PushMessage) -> None:
        try:
            await self._push_service.send_push_notification(
                user_id=user_id,
                title=message.title,
                body=message.body,
                data=message.data,
            )
        except Exception:
            logger.exception("push_dispatch_failed", extra={"user_id": user_id})
