from __future__ import annotations

import logging
from typing import Any, cast

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from courier.api.middleware.request_id import get_request_id
from courier.api.security import AuthenticationRequiredError
from courier.application.use_cases.errors import (
    InvalidOrderRequestError,
    InvalidOrderTransitionError,
    OrderAccessForbiddenError,
    OrderNotFoundError,
    RestaurantNotFoundError,
    UserNotFoundError,
)

logger = logging.getLogger(__name__)

DOMAIN_ERRORS: tuple[tuple[type[Exception], int, str], ...] = (
    (OrderNotFoundError, 404, "ORDER_NOT_FOUND"),
    (RestaurantNotFoundError, 404, "RESTAURANT_NOT_FOUND"),
    (UserNotFoundError, 404, "USER_NOT_FOUND"),
    (OrderAccessForbiddenError, 403, "FORBIDDEN"),
    (InvalidOrderRequestError, 400, "INVALID_ORDER"),
    (InvalidOrderTransitionError, 409, "INVALID_ORDER_TRANSITION"),
    (AuthenticationRequiredError, 401, "UNAUTHORIZED"),
)

_HTTP_STATUS_CODES = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "CONFLICT",
}


def error_body(code: str, message: str, details: dict[str, Any] | None = None) -> dict[str, Any]:
    return {
        "error": {"code": code, "message": message, "details": details or {}},
        "requestId": get_request_id(),
    }


def _respond(status_code: int, code: str, message: str, details: dict[str, Any] | None = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=error_body(code, message, details))


def _domain_handler(status_code: int, code: str):
    async def handler(_: Request, exc: Exception) -> JSONResponse:
        details = getattr(exc, "details", None)
        return _respond(status_code, code, str(exc), details if isinstance(details, dict) else None)

    return handler


async def _on_http_error(_: Request, exc: Exception) -> JSONResponse:
    http_exc = cast(StarletteHTTPException, exc)
    return _respond(
        http_exc.status_code,
        _HTTP_STATUS_CODES.get(http_exc.status_code, "HTTP_ERROR"),
        str(http_exc.detail) if http_exc.detail else "request failed",
    )


async def _on_validation_error(_: Request, exc: Exception) -> JSONResponse:
    errors = jsonable_encoder(cast(RequestValidationError, exc).errors())
    return _respond(400, "INVALID_REQUEST", "request validation failed", {"errors": errors})


async def _on_unhandled_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "unhandled_exception",
        exc_info=(type(exc), exc, exc.__traceback__),
        extra={"method": request.method, "path": request.url.path},
    )
    return _respond(500, "INTERNAL_ERROR", "internal server error")


def register_exception_handlers(app: FastAPI) -> None:
    for exc_cls, status_code, code in DOMAIN_ERRORS:
        app.add_exception_handler(exc_cls, _domain_handler(status_code, code))

    app.add_exception_handler(StarletteHTTPException, _on_http_error)
    app.add_exception_handler(RequestValidationError, _on_validation_error)
    app.add_exception_handler(Exception, _on_unhandled_error)
