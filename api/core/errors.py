"""
Error taxonomy shared by every feature.

Services raise these; `register_error_handlers` maps each one to a fixed
HTTP status at the boundary. Anything else is a 500 with a generic body.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ApiError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_response(self) -> dict[str, str]:
        return {"detail": self.message, "code": self.code}


class AuthenticationRequired(ApiError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "AUTHENTICATION_REQUIRED"


class AccessDenied(ApiError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "ACCESS_DENIED"


class NotFound(ApiError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"


class MalformedIdentifier(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "MALFORMED_IDENTIFIER"


class ValidationFailure(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "VALIDATION_FAILURE"


class UnknownIntent(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "UNKNOWN_INTENT"


class Conflict(ApiError):
    status_code = status.HTTP_409_CONFLICT
    code = "CONFLICT"


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("api_error path=%s code=%s message=%s", request.url.path, exc.code, exc.message)
        else:
            logger.info("api_error path=%s code=%s status=%s", request.url.path, exc.code, exc.status_code)
        return JSONResponse(status_code=exc.status_code, content=exc.to_response())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = [
            {"field": ".".join(str(loc) for loc in e["loc"]), "message": e["msg"]}
            for e in exc.errors()
        ]
        logger.info("request_validation_failed path=%s errors=%s", request.url.path, errors)
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": "Invalid request data.", "code": ValidationFailure.code, "errors": errors},
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("unhandled_error path=%s", request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "An unexpected error occurred.", "code": ApiError.code},
        )
