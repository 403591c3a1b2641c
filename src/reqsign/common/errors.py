"""Shared error helpers and codes."""

from __future__ import annotations

from typing import Any

from starlette.responses import JSONResponse


class ErrorCode:
    UNAUTHORIZED = "unauthorized"
    PAYLOAD_TOO_LARGE = "payload_too_large"
    SERVER_MISCONFIGURED = "server_misconfigured"


def error_response(
    code: str,
    message: str,
    status_code: int,
    details: dict[str, Any] | None = None,
) -> JSONResponse:
    payload: dict[str, Any] = {
        "error": {
            "code": code,
            "message": message,
        }
    }
    if details:
        payload["error"]["details"] = details
    return JSONResponse(payload, status_code=status_code)
