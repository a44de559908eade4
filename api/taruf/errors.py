"""Tagged failures raised by services and rendered by the API layer."""

from __future__ import annotations

from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse


def build_error_payload(code: str, message: str, details: dict[str, Any] | None = None) -> dict[str, Any]:
    payload: dict[str, Any] = {"success": False, "error": {"code": code, "message": message}}
    if details is not None:
        payload["error"]["details"] = details
    return payload


class AppError(Exception):
    status_code = 500
    code = "error"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details

    @property
    def payload(self) -> dict[str, Any]:
        return build_error_payload(self.code, self.message, self.details)


class ValidationFailed(AppError):
    """Missing or malformed input, rejected before touching the store."""

    status_code = 400
    code = "validation_error"


class NotFound(AppError):
    status_code = 404
    code = "not_found"


class Conflict(AppError):
    """A business rule forbids the requested change."""

    status_code = 409
    code = "conflict"


class StoreError(AppError):
    status_code = 500
    code = "store_error"


async def app_error_handler(_: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.payload)
