from __future__ import annotations

from datetime import date, datetime
from typing import Literal, Optional

from pydantic import Field

from .common import CamelModel, InputModel, PartialUpdate

AssetType = Literal["desktop", "laptop", "printer", "other"]
AssetStatus = Literal["available", "assigned", "maintenance", "retired"]

ASSET_TYPES: tuple[str, ...] = ("desktop", "laptop", "printer", "other")
ASSET_STATUSES: tuple[str, ...] = ("available", "assigned", "maintenance", "retired")


class Asset(CamelModel):
    id: str
    name: str
    type: AssetType
    serial_number: str
    model: str
    status: AssetStatus
    assigned_to: Optional[str] = None
    purchase_date: date
    warranty_expiry: date
    location: str
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class AssetCreate(InputModel):
    name: str = Field(min_length=1)
    type: AssetType
    serial_number: str
    model: str
    status: AssetStatus
    assigned_to: Optional[str] = None
    purchase_date: date
    warranty_expiry: date
    location: str
    notes: Optional[str] = None


class AssetUpdate(PartialUpdate):
    NULLABLE = frozenset({"assigned_to", "notes"})

    name: Optional[str] = Field(default=None, min_length=1)
    type: Optional[AssetType] = None
    serial_number: Optional[str] = None
    model: Optional[str] = None
    status: Optional[AssetStatus] = None
    assigned_to: Optional[str] = None
    purchase_date: Optional[date] = None
    warranty_expiry: Optional[date] = None
    location: Optional[str] = None
    notes: Optional[str] = None
