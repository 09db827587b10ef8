from __future__ import annotations

import logging
import os

import httpx

from courier.application.ports.transport import PushProvider

logger = logging.getLogger(__name__)

_DEFAULT_TIMEOUT_SECONDS = 5.0


class HttpPushProvider(PushProvider):
    """Posts notifications to an FCM-style HTTP push gateway."""

    def __init__(
        self,
        gateway_url: str,
        api_token: str | None = None,
        client: httpx.AsyncClient | None = None,
        timeout_seconds: float = _DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self._gateway_url = gateway_url
        self._api_token = api_token
        self._client = client or httpx.AsyncClient(timeout=timeout_seconds)

    async def send(
        self,
        device_token: str,
        title: str,
        body: str,
        data: dict[str, str],
    ) -> str | None:
        headers = {"Authorization": f"Bearer {self._api_token}"} if self._api_token else {}
        response = await self._client.post(
            self._gateway_url,
            json={
                "token": device_token,
                "notification": {"title": title, "body": body},
                "data": data,
            },
            headers=headers,
        )
        response.raise_for_status()
        try:
            message_id = response.json().get("name")
        except ValueError:
            message_id = None
        return str(message_id) if message_id else None

    async def aclose(self) -> None:
        await self._client.aclose()


class LoggingPushProvider(PushProvider):
    """Stands in for the gateway when none is configured; records what would be sent."""

    async def send(
        self,
        device_token: str,
        title: str,
        body: str,
        data: dict[str, str],
    ) -> str | None:
        logger.info(
            "push_gateway_disabled",
            extra={"title": title, "push_data": data},
        )
        return None


def build_push_provider() -> PushProvider:
    gateway_url = os.getenv("PUSH_GATEWAY_URL")
    if not gateway_url:
        return LoggingPushProvider()
    return HttpPushProvider(gateway_url, api_token=os.getenv("PUSH_GATEWAY_TOKEN"))
