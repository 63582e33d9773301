from __future__ import annotations

from http import HTTPStatus
from typing import Any

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, RedirectResponse
from starlette import status
from starlette.exceptions import HTTPException as StarletteHTTPException


class AssetDeskError(Exception):
    """Base class for every domain failure.

    ``code`` is the flat string tag clients switch on; ``status_code`` is only
    used when the error crosses the HTTP boundary.
    """

    code = "OperationFailed"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Operation failed"

    def __init__(self, message: str | None = None, *, details: Any | None = None) -> None:
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


class InvalidCredentials(AssetDeskError):
    code = "InvalidCredentials"
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid credentials"


class InvalidEmail(AssetDeskError):
    code = "InvalidEmail"
    status_code = 422
    default_message = "Please enter a valid email address"


class UnknownAccount(AssetDeskError):
    code = "UnknownAccount"
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "No account found with this email"


class InvalidOrExpiredToken(AssetDeskError):
    code = "InvalidOrExpiredToken"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid or expired reset token"


class NotFound(AssetDeskError):
    code = "NotFound"
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class OperationFailed(AssetDeskError):
    """Persistence or delivery problem; wraps the underlying exception as ``__cause__``."""


class ErrorEnvelope(JSONResponse):
    def __init__(
        self,
        *,
        status_code: int,
        code: str,
        message: str,
        details: Any | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        payload: dict[str, Any] = {"code": code, "message": message}
        if details is not None:
            payload["details"] = details
        super().__init__(payload, status_code=status_code, headers=headers)


async def domain_exception_handler(request: Request, exc: AssetDeskError):
    return ErrorEnvelope(
        status_code=exc.status_code,
        code=exc.code,
        message=exc.message,
        details=jsonable_encoder(exc.details) if exc.details is not None else None,
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    # Browsers hitting a guarded page are sent to the login screen, API clients get JSON.
    if exc.status_code == status.HTTP_401_UNAUTHORIZED:
        accept = (request.headers.get("accept") or "").lower()
        path = request.url.path
        if "text/html" in accept and not path.startswith("/api") and not path.startswith("/login"):
            return RedirectResponse(url=f"/login?next={request.url.path}", status_code=302)
    detail = exc.detail
    message = detail if isinstance(detail, str) else HTTPStatus(exc.status_code).phrase
    details = detail if isinstance(detail, dict) else None
    return ErrorEnvelope(
        status_code=exc.status_code,
        code="http_error",
        message=message,
        details=details,
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return ErrorEnvelope(
        status_code=422,
        code="validation_error",
        message="Validation failed",
        details={"errors": jsonable_encoder(exc.errors())},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AssetDeskError, domain_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
