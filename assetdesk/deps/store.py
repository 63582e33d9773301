from __future__ import annotations

from fastapi import Request

from ..store.state import InventoryStore


def get_store(request: Request) -> InventoryStore:
    """FastAPI dependency returning the store built for this app."""

    return request.app.state.store
