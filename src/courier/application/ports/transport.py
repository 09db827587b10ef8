from __future__ import annotations

from typing import Any, Protocol


class RealtimeConnection(Protocol):
    """A live transport handle owned by one realtime session."""

    @property
    def connection_id(self) -> str: ...

    async def send(self, event: str, data: Any) -> None: ...

    async def close(self, code: int = 1000, reason: str | None = None) -> None: ...


class PushProvider(Protocol):
    async def send(
        self,
        device_token: str,
        title: str,
        body: str,
        data: dict[str, str],
    ) -> str | None: ...
