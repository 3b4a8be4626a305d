"""
API error types and the handlers that render them.

Response bodies:
- client errors:   {"error": "..."}
- not found:       {"message": "..."}
- backend errors:  {"error": "...", "details": "..."}
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ApiError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def to_response(self) -> dict[str, Any]:
        raise NotImplementedError


class BadRequestError(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, error: str) -> None:
        super().__init__(error)
        self.error = error

    def to_response(self) -> dict[str, Any]:
        return {"error": self.error}


class NotFoundError(ApiError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_response(self) -> dict[str, Any]:
        return {"message": self.message}


class BackendError(ApiError):
    """A database operation failed. `details` carries the driver's message."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, error: str, details: str) -> None:
        super().__init__(f"{error}: {details}")
        self.error = error
        self.details = details

    def to_response(self) -> dict[str, Any]:
        return {"error": self.error, "details": self.details}


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content=exc.to_response())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        # Only reachable for bodies that are not valid JSON.
        logger.warning("request_validation_failed path=%s errors=%s", request.url.path, exc.errors())
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "error": "Request body must be a JSON object.",
                "details": [
                    {"field": ".".join(str(loc) for loc in e["loc"]), "message": e["msg"]}
                    for e in exc.errors()
                ],
            },
        )
