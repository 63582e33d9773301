from __future__ import annotations

from fastapi import APIRouter, Depends

from ..deps.auth import require_session
from ..deps.store import get_store
from ..schemas.dashboard import Dashboard, DashboardStats
from ..services.dashboard import build_dashboard
from ..services.queries import compute_stats
from ..store.state import InventoryStore

router = APIRouter(prefix="/api/v1/dashboard", tags=["dashboard"], dependencies=[Depends(require_session)])


@router.get("", response_model=Dashboard)
def api_dashboard(store: InventoryStore = Depends(get_store)):
    assets = store.fetch_assets()
    items = store.fetch_stock_items()
    dashboard = build_dashboard(assets, items, store.previous_stats)
    # The first view becomes the baseline later trends are measured against.
    if store.previous_stats is None:
        store.previous_stats = dashboard.stats
    return dashboard


@router.post("/snapshot", response_model=DashboardStats, summary="Use the current numbers as the trend baseline")
def api_snapshot(store: InventoryStore = Depends(get_store)):
    store.previous_stats = compute_stats(store.fetch_assets(), store.fetch_stock_items())
    return store.previous_stats
