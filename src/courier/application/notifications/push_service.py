from __future__ import annotations

import logging

from courier.application.metrics.notifications import record_push
from courier.application.ports.repositories import DeviceTokenStore
from courier.application.ports.transport import PushProvider
from courier.domain.common.ids import UserId

logger = logging.getLogger(__name__)


class PushNotificationService:
    """Best-effort push delivery keyed by the user's stored device token.

    Never raises: a missing token is a warning and provider failures are
    logged and counted.
    """

    def __init__(self, token_store: DeviceTokenStore, provider: PushProvider) -> None:
        self._token_store = token_store
        self._provider = provider

    async def send_push_notification(
        self,
        user_id: UserId,
        title: str,
        body: str,
        data: dict[str, str] | None = None,
    ) -> bool:
        try:
            device_token = await self._token_store.get_push_token(user_id)
            if not device_token:
                record_push("no_token")
                logger.warning("push_token_missing", extra={"user_id": user_id})
                return False

            message_id = await self._provider.send(
                device_token=device_token,
                title=title,
                body=body,
                data=data or {},
            )
        except Exception:
            record_push("failed")
            logger.exception("push_send_failed", extra={"user_id": user_id})
            return False

        record_push("sent")
        logger.info("push_sent", extra={"user_id": user_id, "message_id": message_id})
        return True

    async def save_token(self, user_id: UserId, token: str) -> bool:
        saved = await self._token_store.save_push_token(user_id, token)
        if saved:
            logger.info("push_token_saved", extra={"user_id": user_id})
        return saved
