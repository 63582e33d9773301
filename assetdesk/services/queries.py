"""Search, filters and aggregates over the in-memory collections.

Everything here is a pure function of its arguments and is recomputed on
every call. Collections are small, so there is no caching layer.
"""

from __future__ import annotations

from collections import defaultdict
from decimal import ROUND_FLOOR, Decimal
from typing import Iterable, Optional, Sequence

from ..schemas.asset import Asset
from ..schemas.dashboard import ChartPoint, DashboardStats, DashboardTrends, Trend
from ..schemas.stock import StockItem

ALL = "all"
STOCK_LEVELS = (ALL, "low", "adequate")

ASSET_TYPE_LABELS: dict[str, str] = {
    "desktop": "Desktops",
    "laptop": "Laptops",
    "printer": "Printers",
    "other": "Other",
}


def _matches(query: str, values: Iterable[Optional[str]]) -> bool:
    needle = query.lower()
    return any(needle in value.lower() for value in values if value)


def search_assets(assets: Sequence[Asset], query: str | None) -> list[Asset]:
    """Case-insensitive substring match on name, serial, model and assignee."""

    if not query:
        return list(assets)
    return [a for a in assets if _matches(query, (a.name, a.serial_number, a.model, a.assigned_to))]


def search_stock_items(items: Sequence[StockItem], query: str | None) -> list[StockItem]:
    """Case-insensitive substring match on name, category and supplier."""

    if not query:
        return list(items)
    return [i for i in items if _matches(query, (i.name, i.category, i.supplier))]


def filter_assets(
    assets: Sequence[Asset],
    *,
    query: str | None = None,
    asset_type: str = ALL,
    status: str = ALL,
) -> list[Asset]:
    rows = search_assets(assets, query)
    if asset_type != ALL:
        rows = [a for a in rows if a.type == asset_type]
    if status != ALL:
        rows = [a for a in rows if a.status == status]
    return rows


def is_low_stock(item: StockItem) -> bool:
    return item.is_low_stock


def matches_stock_level(item: StockItem, level: str) -> bool:
    if level == "low":
        return is_low_stock(item)
    if level == "adequate":
        return not is_low_stock(item)
    return True


def filter_stock_items(
    items: Sequence[StockItem],
    *,
    query: str | None = None,
    category: str = ALL,
    stock_level: str = ALL,
) -> list[StockItem]:
    if stock_level not in STOCK_LEVELS:
        raise ValueError(f"stock_level must be one of {', '.join(STOCK_LEVELS)}")
    rows = search_stock_items(items, query)
    if category != ALL:
        rows = [i for i in rows if i.category == category]
    return [i for i in rows if matches_stock_level(i, stock_level)]


def low_stock_items(items: Sequence[StockItem], limit: int | None = None) -> list[StockItem]:
    rows = [i for i in items if is_low_stock(i)]
    return rows if limit is None else rows[:limit]


def stock_categories(items: Sequence[StockItem]) -> list[str]:
    """Distinct categories in the order they first appear."""

    return list(dict.fromkeys(i.category for i in items))


def compute_stats(assets: Sequence[Asset], items: Sequence[StockItem]) -> DashboardStats:
    by_status: dict[str, int] = defaultdict(int)
    for asset in assets:
        by_status[asset.status] += 1
    return DashboardStats(
        total_assets=len(assets),
        available_assets=by_status["available"],
        assigned_assets=by_status["assigned"],
        maintenance_assets=by_status["maintenance"],
        retired_assets=by_status["retired"],
        total_stock_items=len(items),
        low_stock_items=len(low_stock_items(items)),
    )


def calculate_trend(current: int, previous: int) -> Trend:
    """Percent change from ``previous`` to ``current``.

    A zero baseline reports 0% and positive instead of dividing by zero.
    Otherwise the signed change is rounded with halves going up (-12.5
    becomes -12, 12.5 becomes 13), then its magnitude is reported and the
    sign goes into ``is_positive``.
    """

    if previous == 0:
        return Trend(value=0, is_positive=True)
    change = Decimal(current - previous) * 100 / Decimal(previous)
    rounded = (change + Decimal("0.5")).to_integral_value(rounding=ROUND_FLOOR)
    value = int(abs(rounded))
    return Trend(value=value, is_positive=change >= 0)


def calculate_trends(current: DashboardStats, previous: DashboardStats) -> DashboardTrends:
    return DashboardTrends(
        **{
            name: calculate_trend(getattr(current, name), getattr(previous, name))
            for name in DashboardStats.model_fields
        }
    )


def assets_by_type(assets: Sequence[Asset]) -> list[ChartPoint]:
    """Asset count per type; types with no assets are left out."""

    counts: dict[str, int] = defaultdict(int)
    for asset in assets:
        counts[asset.type] += 1
    return [
        ChartPoint(name=label, value=counts[kind])
        for kind, label in ASSET_TYPE_LABELS.items()
        if counts[kind] > 0
    ]


def stock_by_category(items: Sequence[StockItem]) -> list[ChartPoint]:
    """Total quantity per category, largest first."""

    totals: dict[str, int] = {}
    for item in items:
        totals[item.category] = totals.get(item.category, 0) + item.quantity
    points = [ChartPoint(name=name, value=value) for name, value in totals.items()]
    return sorted(points, key=lambda point: point.value, reverse=True)
