from __future__ import annotations

import logging
import os
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import Counter, Histogram
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from courier.api.error_handling import register_exception_handlers
from courier.api.middleware.request_id import RequestIDMiddleware
from courier.api.routes.health import router as health_router
from courier.api.routes.metrics import router as metrics_router
from courier.api.routes.notifications import router as notifications_router
from courier.api.routes.orders import router as orders_router
from courier.api.services import AppServices, build_services_from_env
from courier.api.ws.routes import router as ws_router
from courier.infrastructure.observability.logging_config import configure_logging
from courier.infrastructure.observability.otel import configure_otel

logger = logging.getLogger("courier.api.access")

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total number of HTTP requests",
    ["method", "route", "status_code"],
)
REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "route"],
)


def _cors_allow_origins() -> list[str]:
    env = os.getenv("APP_ENV", "dev").lower()
    if env in {"dev", "test"}:
        return ["*"]

    # Outside dev/test nothing is allowed unless listed explicitly.
    raw_value = os.getenv("CORS_ALLOW_ORIGINS", "")
    return [origin.strip() for origin in raw_value.split(",") if origin.strip()]


def _route_template(request: Request) -> str:
    # Order ids in raw paths would explode label cardinality.
    route = request.scope.get("route")
    return getattr(route, "path", None) or "unmatched"


class AccessLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()
        method = request.method
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        except Exception:
            logger.exception(
                "request_error",
                extra={"method": method, "path": request.url.path, "status_code": status_code},
            )
            raise
        finally:
            duration_ms = (time.perf_counter() - started) * 1000
            route = _route_template(request)
            REQUEST_COUNT.labels(method=method, route=route, status_code=str(status_code)).inc()
            REQUEST_LATENCY.labels(method=method, route=route).observe(duration_ms / 1000)
            logger.info(
                "request_complete",
                extra={
                    "method": method,
                    "path": request.url.path,
                    "status_code": status_code,
                    "duration_ms": round(duration_ms, 2),
                },
            )


@asynccontextmanager
async def lifespan(app: FastAPI):
    if getattr(app.state, "services", None) is None:
        app.state.services = build_services_from_env()
    logger.info("app_started")
    try:
        yield
    finally:
        close_provider = getattr(app.state.services.push_provider, "aclose", None)
        if close_provider is not None:
            await close_provider()


def create_app(services: AppServices | None = None) -> FastAPI:
    configure_logging()

    app = FastAPI(title="Courier Backend", version="0.1.0", lifespan=lifespan)
    app.state.services = services
    register_exception_handlers(app)
    app.include_router(health_router)
    app.include_router(metrics_router)
    app.include_router(orders_router)
    app.include_router(notifications_router)
    app.include_router(ws_router)

    app.add_middleware(AccessLogMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=_cors_allow_origins(),
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["ETag", "X-Request-Id"],
    )

    configure_otel(app)
    return app


app = create_app()
