"""Application factory and top-level wiring for AssetDesk.

This module is the glue that brings together configuration, storage, the
domain store, API routers, and error handling. It gives a new developer a
bird's-eye view of *what* pieces exist, *when* they are initialised, *why*
they are required, and *how* they interact to serve the inventory API.

*What:* ``create_app`` returns a fully wired FastAPI application.
*When:* Once per process in ``assetdesk.main``; once per test in the suite.
*Why:* Building the app in a function (instead of at import time) means each
caller gets its own store, so tests never share state through a module global.
*How:* Settings pick the blob store backend and mailer, those feed one
``InventoryStore`` kept on ``app.state``, and routers reach it through the
``get_store`` dependency.
"""

from __future__ import annotations

from fastapi import FastAPI

from .core.config import AppSettings, get_settings
from .core.errors import register_exception_handlers
from .db.blobstore import build_blob_store
from .middlewares import install_middlewares
from .services.mailer import build_mailer
from .store.state import InventoryStore


def create_app(settings: AppSettings | None = None, store: InventoryStore | None = None) -> FastAPI:
    settings = settings or get_settings()

    # ---------- App init ----------
    app = FastAPI(title=settings.APP_NAME)
    app.state.settings = settings
    # One store per app: it holds the login session and the cached collections.
    app.state.store = store or InventoryStore(
        build_blob_store(settings),
        settings=settings,
        mailer=build_mailer(settings),
    )

    # ---------- Middleware ----------
    # Request ids, security headers and (when configured) CORS.
    install_middlewares(app, allowed_origins=settings.ALLOWED_ORIGINS)

    # ---------- Exception handling ----------
    # Domain errors, HTTP errors and validation errors all leave as the same
    # ``{code, message, details}`` envelope.
    register_exception_handlers(app)

    # ---------- Routers ----------
    # Auth routes are open; every other router requires a logged-in session
    # through a router-level dependency.
    from .routers import api_assets, api_auth, api_dashboard, api_stock

    app.include_router(api_auth.router)
    app.include_router(api_assets.router)
    app.include_router(api_stock.router)
    app.include_router(api_dashboard.router)

    return app


__all__ = ["create_app"]
