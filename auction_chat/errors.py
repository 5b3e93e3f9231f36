from __future__ import annotations

import enum
import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ErrorStatus(enum.Enum):
    INTERNAL_SERVER_ERROR = (500, "COMMON500", "Server error, please contact an administrator.")
    BAD_REQUEST = (400, "COMMON400", "Invalid request.")
    UNAUTHORIZED = (401, "COMMON401", "Authentication is required.")
    FORBIDDEN = (403, "COMMON403", "Forbidden request.")
    NOT_FOUND = (404, "COMMON404", "Requested resource was not found.")
    CONFLICT = (409, "COMMON409", "Request conflicts with the current state.")

    USER_NOT_FOUND = (404, "USER4041", "User not found.")
    ITEM_NOT_FOUND = (404, "ITEM4041", "Item not found.")

    CHAT_NOT_FOUND = (404, "CHAT4041", "Chat room not found.")
    CHAT_NOT_PARTICIPANT = (403, "CHAT4031", "Not a participant of this chat.")
    CHAT_NO_WINNER = (400, "CHAT4001", "Item has no seller or winner yet.")
    CHAT_CLOSED = (409, "CHAT4091", "This conversation has ended.")

    ALARM_NOT_FOUND = (404, "ALARM4041", "Alarm not found.")
    ALARM_NOT_OWNER = (403, "ALARM4031", "Not your alarm.")

    def __init__(self, http_status: int, code: str, message: str):
        self.http_status = http_status
        self.code = code
        self.message = message


class AppError(Exception):
    """Base error carrying a stable error code and an HTTP status."""

    default_status = ErrorStatus.BAD_REQUEST

    def __init__(self, status: ErrorStatus | None = None, message: str | None = None, data: Any = None):
        self.status = status or self.default_status
        self.message = message or self.status.message
        self.data = data
        super().__init__(self.message)

    @property
    def code(self) -> str:
        return self.status.code

    @property
    def http_status(self) -> int:
        return self.status.http_status


class ValidationFailed(AppError):
    default_status = ErrorStatus.BAD_REQUEST


class Unauthenticated(AppError):
    default_status = ErrorStatus.UNAUTHORIZED


class Forbidden(AppError):
    default_status = ErrorStatus.FORBIDDEN


class NotFound(AppError):
    default_status = ErrorStatus.NOT_FOUND


class Conflict(AppError):
    default_status = ErrorStatus.CONFLICT


def failure_body(code: str, message: str, result: Any = None) -> dict:
    return {"is_success": False, "code": code, "message": message, "result": result}


def success_body(result: Any = None) -> dict:
    return {"is_success": True, "code": "COMMON200", "message": "OK", "result": result}


async def _handle_app_error(request: Request, exc: AppError) -> JSONResponse:
    logger.info("%s %s -> %s (%s)", request.method, request.url.path, exc.code, exc.message)
    return JSONResponse(failure_body(exc.code, exc.message, exc.data), status_code=exc.http_status)


async def _handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors: dict[str, str] = {}
    for error in exc.errors():
        field = ".".join(str(part) for part in error.get("loc", ()) if part not in {"body", "query", "path", "header"})
        message = error.get("msg", "")
        errors[field] = f"{errors[field]}, {message}" if field in errors else message
    status = ErrorStatus.BAD_REQUEST
    return JSONResponse(failure_body(status.code, status.message, errors), status_code=status.http_status)


async def _handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    status = ErrorStatus.INTERNAL_SERVER_ERROR
    return JSONResponse(failure_body(status.code, status.message), status_code=status.http_status)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, _handle_app_error)
    app.add_exception_handler(RequestValidationError, _handle_validation_error)
    app.add_exception_handler(Exception, _handle_unexpected)
