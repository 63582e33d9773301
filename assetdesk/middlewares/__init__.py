from __future__ import annotations

from typing import Sequence

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .request_id import RequestIdMiddleware, principal_ctx_var, request_id_ctx_var
from .security_headers import SecurityHeadersMiddleware


def install_middlewares(app: FastAPI, *, allowed_origins: Sequence[str] = ()) -> None:
    """Register the HTTP middleware stack on ``app``.

    Starlette wraps later registrations around earlier ones, so the order here
    is innermost first: security headers, then request ids, then CORS (only
    when origins are configured) on the outside.
    """

    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestIdMiddleware)
    if allowed_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=list(allowed_origins),
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )


__all__ = [
    "install_middlewares",
    "RequestIdMiddleware",
    "SecurityHeadersMiddleware",
    "principal_ctx_var",
    "request_id_ctx_var",
]
