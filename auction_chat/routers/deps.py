from __future__ import annotations

from typing import Any

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from ..constants import USER_ID_HEADER
from ..errors import ErrorStatus, Unauthenticated, ValidationFailed, success_body


def require_user_id(request: Request) -> int:
    """Caller identity as forwarded by the upstream auth layer in the ``user-id`` header."""
    raw = request.headers.get(USER_ID_HEADER)
    if not raw or not raw.strip():
        raise Unauthenticated()
    try:
        user_id = int(raw.strip())
    except ValueError as exc:
        raise ValidationFailed(ErrorStatus.BAD_REQUEST, f"Invalid {USER_ID_HEADER} header") from exc
    if user_id <= 0:
        raise ValidationFailed(ErrorStatus.BAD_REQUEST, f"Invalid {USER_ID_HEADER} header")
    return user_id


def ok(result: Any = None, status_code: int = 200, headers: dict[str, str] | None = None) -> JSONResponse:
    return JSONResponse(jsonable_encoder(success_body(result)), status_code=status_code, headers=headers)
