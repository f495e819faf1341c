from __future__ import annotations

from datetime import datetime
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .records import Number


class CategoryTotals(BaseModel):
    """Per-category rollup inside a snapshot."""
    model_config = ConfigDict(frozen=True)

    on_hand: Number = Field(default=0, description="Sum of on-hand quantity")
    on_order: Number = Field(default=0, description="Sum of on-order quantity")
    item_count: int = Field(default=0, description="Number of products in the category")
    low_stock_count: int = Field(default=0, description="Products at or below their reorder threshold")


class EntityValues(BaseModel):
    """Per-product values inside a snapshot."""
    model_config = ConfigDict(frozen=True)

    on_hand: Number = Field(default=0, description="On-hand quantity")
    on_order: Number = Field(default=0, description="Quantity on order")
    reorder_threshold: Optional[Number] = Field(default=None, description="Reorder threshold, if known")
    category: str = Field(description="Category label the product was grouped under")
    name: Optional[str] = Field(default=None, description="Product display name")
    on_hand_known: bool = Field(default=True, description="False when the source row carried no on-hand quantity")

    @property
    def is_low_stock(self) -> bool:
        return (
            self.on_hand_known
            and self.reorder_threshold is not None
            and self.on_hand <= self.reorder_threshold
        )


class Snapshot(BaseModel):
    """Immutable, timestamped rollup of the full inventory."""
    model_config = ConfigDict(frozen=True)

    taken_at: datetime = Field(description="When the inventory was observed")
    product_count: int = Field(description="Number of products in the snapshot")
    total_on_hand: Number = Field(description="Sum of on-hand quantity")
    total_on_order: Number = Field(description="Sum of on-order quantity")
    low_stock_count: int = Field(description="Products at or below their reorder threshold")
    by_category: Dict[str, CategoryTotals] = Field(default_factory=dict, description="Rollups keyed by category")
    by_entity: Dict[str, EntityValues] = Field(default_factory=dict, description="Values keyed by product id")

    @field_validator("taken_at")
    @classmethod
    def _aware(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            raise ValueError("taken_at must be timezone-aware")
        return value


class UpdateEvent(BaseModel):
    """Lightweight change-log entry written when a new snapshot is accepted."""
    model_config = ConfigDict(frozen=True)

    observed_at: datetime = Field(description="When the change was observed")
    product_count: int = Field(description="Number of products at that time")
    total_stock: Number = Field(description="Total on-hand quantity at that time")

    @field_validator("observed_at")
    @classmethod
    def _aware(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            raise ValueError("observed_at must be timezone-aware")
        return value
