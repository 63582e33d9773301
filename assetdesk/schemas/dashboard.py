from __future__ import annotations

from pydantic import Field

from .asset import Asset
from .common import CamelModel
from .stock import StockItemOut


class Trend(CamelModel):
    value: int = 0
    is_positive: bool = True


class DashboardStats(CamelModel):
    total_assets: int = 0
    available_assets: int = 0
    assigned_assets: int = 0
    maintenance_assets: int = 0
    retired_assets: int = 0
    total_stock_items: int = 0
    low_stock_items: int = 0


class DashboardTrends(CamelModel):
    total_assets: Trend = Field(default_factory=Trend)
    available_assets: Trend = Field(default_factory=Trend)
    assigned_assets: Trend = Field(default_factory=Trend)
    maintenance_assets: Trend = Field(default_factory=Trend)
    retired_assets: Trend = Field(default_factory=Trend)
    total_stock_items: Trend = Field(default_factory=Trend)
    low_stock_items: Trend = Field(default_factory=Trend)


class ChartPoint(CamelModel):
    name: str
    value: int


class Dashboard(CamelModel):
    stats: DashboardStats
    trends: DashboardTrends
    assets_by_type: list[ChartPoint]
    stock_by_category: list[ChartPoint]
    recent_assets: list[Asset]
    low_stock_items: list[StockItemOut]
