from __future__ import annotations

from typing import Literal

from fastapi import APIRouter, Depends, Query, status

from ..deps.auth import require_session
from ..deps.store import get_store
from ..schemas.stock import QuantityUpdate, StockItemCreate, StockItemOut, StockItemUpdate
from ..services.queries import filter_stock_items, low_stock_items, stock_categories
from ..store.state import InventoryStore

router = APIRouter(prefix="/api/v1/stock", tags=["stock"], dependencies=[Depends(require_session)])

LevelFilter = Literal["all", "low", "adequate"]


@router.get("", response_model=list[StockItemOut])
def api_list(
    q: str | None = Query(default=None, description="Matches name, category or supplier"),
    category: str = "all",
    level: LevelFilter = "all",
    store: InventoryStore = Depends(get_store),
):
    rows = filter_stock_items(store.fetch_stock_items(), query=q, category=category, stock_level=level)
    return [StockItemOut.from_item(item) for item in rows]


@router.get("/categories", response_model=list[str])
def api_categories(store: InventoryStore = Depends(get_store)):
    return stock_categories(store.fetch_stock_items())


@router.get("/low", response_model=list[StockItemOut])
def api_low_stock(limit: int | None = Query(default=None, ge=1), store: InventoryStore = Depends(get_store)):
    return [StockItemOut.from_item(item) for item in low_stock_items(store.fetch_stock_items(), limit)]


@router.get("/{item_id}", response_model=StockItemOut)
def api_get(item_id: str, store: InventoryStore = Depends(get_store)):
    return StockItemOut.from_item(store.get_stock_item(item_id))


@router.post("", response_model=StockItemOut, status_code=status.HTTP_201_CREATED)
def api_create(payload: StockItemCreate, store: InventoryStore = Depends(get_store)):
    return StockItemOut.from_item(store.add_stock_item(payload))


@router.patch("/{item_id}", response_model=StockItemOut)
def api_update(item_id: str, payload: StockItemUpdate, store: InventoryStore = Depends(get_store)):
    return StockItemOut.from_item(store.update_stock_item(item_id, payload))


@router.put("/{item_id}/quantity", response_model=StockItemOut)
def api_set_quantity(item_id: str, payload: QuantityUpdate, store: InventoryStore = Depends(get_store)):
    return StockItemOut.from_item(store.update_stock_quantity(item_id, payload.quantity))


@router.post("/{item_id}/restock", response_model=StockItemOut)
def api_restock(item_id: str, store: InventoryStore = Depends(get_store)):
    return StockItemOut.from_item(store.restock(item_id))


@router.delete("/{item_id}")
def api_delete(item_id: str, store: InventoryStore = Depends(get_store)):
    store.delete_stock_item(item_id)
    return {"status": "deleted"}
