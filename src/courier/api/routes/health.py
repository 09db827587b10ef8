from __future__ import annotations

import logging

from fastapi import APIRouter, Response, status

from courier.infrastructure.db.session import ping_database

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/health", tags=["health"])

_PROBE_TIMEOUT_SECONDS = 1.0


@router.get("/live")
async def live() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/ready")
async def ready(response: Response) -> dict[str, object]:
    """Readiness gates on the order store; realtime state is in-process and always ready."""
    checks = {"postgres": await ping_database(timeout_seconds=_PROBE_TIMEOUT_SECONDS)}
    if all(checks.values()):
        return {"status": "ok", "checks": checks}

    logger.warning("readiness_check_failed", extra={"reason": ",".join(k for k, ok in checks.items() if not ok)})
    response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return {"status": "unavailable", "checks": checks}
