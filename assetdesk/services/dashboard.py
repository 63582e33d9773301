from __future__ import annotations

from typing import Sequence

from ..schemas.asset import Asset
from ..schemas.dashboard import Dashboard, DashboardStats
from ..schemas.stock import StockItem, StockItemOut
from .queries import assets_by_type, calculate_trends, compute_stats, low_stock_items, stock_by_category

PREVIEW_SIZE = 3


def build_dashboard(
    assets: Sequence[Asset],
    items: Sequence[StockItem],
    previous: DashboardStats | None = None,
) -> Dashboard:
    """Assemble the overview: counters, trends against ``previous``, both
    charts and short previews of assets and low stock lines."""

    stats = compute_stats(assets, items)
    baseline = previous if previous is not None else stats
    return Dashboard(
        stats=stats,
        trends=calculate_trends(stats, baseline),
        assets_by_type=assets_by_type(assets),
        stock_by_category=stock_by_category(items),
        recent_assets=list(assets[:PREVIEW_SIZE]),
        low_stock_items=[
            StockItemOut.from_item(item) for item in low_stock_items(items, PREVIEW_SIZE)
        ],
    )
