from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import Field, computed_field

from .common import CamelModel, InputModel, PartialUpdate


class StockItem(CamelModel):
    id: str
    name: str
    category: str
    quantity: int = Field(ge=0)
    min_quantity: int = Field(ge=0)
    unit: str
    location: str
    supplier: str
    last_restocked: datetime
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @property
    def is_low_stock(self) -> bool:
        """Reorder threshold reached; always derived from the current numbers."""
        return self.quantity <= self.min_quantity


class StockItemOut(StockItem):
    @classmethod
    def from_item(cls, item: StockItem) -> "StockItemOut":
        return cls.model_validate(item.model_dump())

    @computed_field(alias="lowStock")  # type: ignore[prop-decorator]
    @property
    def low_stock(self) -> bool:
        return self.is_low_stock


class StockItemCreate(InputModel):
    name: str = Field(min_length=1)
    category: str = Field(min_length=1)
    quantity: int = Field(ge=0)
    min_quantity: int = Field(ge=0)
    unit: str
    location: str
    supplier: str
    # Stamped with the creation time when the form leaves it blank.
    last_restocked: Optional[datetime] = None
    notes: Optional[str] = None


class StockItemUpdate(PartialUpdate):
    NULLABLE = frozenset({"notes"})

    name: Optional[str] = Field(default=None, min_length=1)
    category: Optional[str] = Field(default=None, min_length=1)
    quantity: Optional[int] = Field(default=None, ge=0)
    min_quantity: Optional[int] = Field(default=None, ge=0)
    unit: Optional[str] = None
    location: Optional[str] = None
    supplier: Optional[str] = None
    last_restocked: Optional[datetime] = None
    notes: Optional[str] = None


class QuantityUpdate(InputModel):
    quantity: int = Field(ge=0)
