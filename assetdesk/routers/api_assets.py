from __future__ import annotations

from typing import Literal

from fastapi import APIRouter, Depends, Query, status

from ..deps.auth import require_session
from ..deps.store import get_store
from ..schemas.asset import Asset, AssetCreate, AssetUpdate
from ..services.queries import filter_assets
from ..store.state import InventoryStore

router = APIRouter(prefix="/api/v1/assets", tags=["assets"], dependencies=[Depends(require_session)])

TypeFilter = Literal["all", "desktop", "laptop", "printer", "other"]
StatusFilter = Literal["all", "available", "assigned", "maintenance", "retired"]


@router.get("", response_model=list[Asset])
def api_list(
    q: str | None = Query(default=None, description="Matches name, serial number, model or assignee"),
    asset_type: TypeFilter = Query(default="all", alias="type"),
    asset_status: StatusFilter = Query(default="all", alias="status"),
    store: InventoryStore = Depends(get_store),
):
    return filter_assets(store.fetch_assets(), query=q, asset_type=asset_type, status=asset_status)


@router.get("/{asset_id}", response_model=Asset)
def api_get(asset_id: str, store: InventoryStore = Depends(get_store)):
    return store.get_asset(asset_id)


@router.post("", response_model=Asset, status_code=status.HTTP_201_CREATED)
def api_create(payload: AssetCreate, store: InventoryStore = Depends(get_store)):
    return store.add_asset(payload)


@router.patch("/{asset_id}", response_model=Asset)
def api_update(asset_id: str, payload: AssetUpdate, store: InventoryStore = Depends(get_store)):
    return store.update_asset(asset_id, payload)


@router.delete("/{asset_id}")
def api_delete(asset_id: str, store: InventoryStore = Depends(get_store)):
    store.delete_asset(asset_id)
    return {"status": "deleted"}
