"""Demo records written into empty collections.

Two sets exist: the pair of assets shown the first time the asset list is
opened on an empty store, and the bootstrap data written when the very first
account signs up.
"""

from __future__ import annotations

from datetime import datetime
from typing import Callable

from ..schemas.asset import Asset
from ..schemas.stock import StockItem

IdFactory = Callable[[], str]


def first_fetch_assets(now: datetime, new_id: IdFactory) -> list[Asset]:
    return [
        Asset(
            id=new_id(),
            name="Dell XPS 15",
            type="laptop",
            serial_number="DLL-XPS-2023-001",
            model="XPS 15 9520",
            status="assigned",
            assigned_to="John Doe",
            purchase_date="2023-01-15",
            warranty_expiry="2026-01-15",
            location="Main Office",
            notes="Developer workstation",
            created_at=now,
            updated_at=now,
        ),
        Asset(
            id=new_id(),
            name="HP LaserJet Pro",
            type="printer",
            serial_number="HP-LJP-2023-001",
            model="M404dn",
            status="available",
            purchase_date="2023-02-01",
            warranty_expiry="2025-02-01",
            location="Print Room",
            notes="Shared network printer",
            created_at=now,
            updated_at=now,
        ),
    ]


def signup_assets(now: datetime, new_id: IdFactory) -> list[Asset]:
    return [
        Asset(
            id=new_id(),
            name="Dell XPS 13",
            type="laptop",
            serial_number="DL123456",
            model="XPS 13 9310",
            status="available",
            purchase_date="2025-01-15",
            warranty_expiry="2028-01-15",
            location="Office 101",
            created_at=now,
            updated_at=now,
        ),
        Asset(
            id=new_id(),
            name="HP LaserJet Pro",
            type="printer",
            serial_number="HP789012",
            model="M404n",
            status="assigned",
            assigned_to="IT Department",
            purchase_date="2024-11-20",
            warranty_expiry="2026-11-20",
            location="Office 102",
            created_at=now,
            updated_at=now,
        ),
    ]


def demo_stock_items(now: datetime, new_id: IdFactory) -> list[StockItem]:
    return [
        StockItem(
            id=new_id(),
            name="A4 Paper",
            category="Office Supplies",
            quantity=500,
            min_quantity=100,
            unit="sheets",
            location="Storage Room A",
            supplier="Office Depot",
            last_restocked=now,
            created_at=now,
            updated_at=now,
        ),
        StockItem(
            id=new_id(),
            name="Ink Cartridges",
            category="Printer Supplies",
            quantity=15,
            min_quantity=5,
            unit="pieces",
            location="Storage Room B",
            supplier="HP Store",
            last_restocked=now,
            created_at=now,
            updated_at=now,
        ),
    ]
