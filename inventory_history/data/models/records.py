from __future__ import annotations

import math
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

Number = Union[int, float]


class InventoryRecord(BaseModel):
    """One product row as handed over by the fetch/parse collaborator."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Stable product identifier (SKU)")
    category: Optional[str] = Field(default=None, description="Product category; blank means uncategorized")
    on_hand: Optional[Number] = Field(default=None, description="Current on-hand quantity")
    on_order: Optional[Number] = Field(default=None, description="Quantity on order")
    reorder_threshold: Optional[Number] = Field(default=None, description="Reorder threshold")
    name: Optional[str] = Field(default=None, description="Product display name")

    @field_validator("id", mode="before")
    @classmethod
    def _id_not_blank(cls, value):
        if value is None:
            raise ValueError("id is required")
        value = str(value).strip()
        if not value:
            raise ValueError("id must not be blank")
        return value

    @field_validator("on_hand", "on_order", "reorder_threshold", mode="before")
    @classmethod
    def _nan_to_none(cls, value):
        # pandas hands missing cells over as NaN
        if isinstance(value, float) and math.isnan(value):
            return None
        return value

    @field_validator("category", "name", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        if value is None or (isinstance(value, float) and math.isnan(value)):
            return None
        value = str(value).strip()
        return value or None
