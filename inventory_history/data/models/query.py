from __future__ import annotations

from datetime import datetime, timedelta
from typing import Literal, NamedTuple, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from .records import Number
from .snapshots import CategoryTotals, EntityValues


class TotalView(BaseModel):
    """Aggregate totals across the whole inventory."""
    model_config = ConfigDict(frozen=True)
    kind: Literal["total"] = "total"


class CategoryView(BaseModel):
    """Rollup series for one category."""
    model_config = ConfigDict(frozen=True)
    kind: Literal["category"] = "category"
    name: str = Field(description="Category label")


class EntityView(BaseModel):
    """Value series for one product."""
    model_config = ConfigDict(frozen=True)
    kind: Literal["entity"] = "entity"
    id: str = Field(description="Product identifier")


View = Union[TotalView, CategoryView, EntityView]


class Window(BaseModel):
    """Lookback window; `days=None` means all retained history."""
    model_config = ConfigDict(frozen=True)
    days: Optional[float] = Field(default=None, gt=0, description="Lookback in days, or None for everything")

    @classmethod
    def last_days(cls, days: float) -> "Window":
        return cls(days=days)

    @classmethod
    def all(cls) -> "Window":
        return cls()

    def start(self, now: datetime) -> Optional[datetime]:
        if self.days is None:
            return None
        try:
            return now - timedelta(days=self.days)
        except OverflowError:
            # Reaches back past datetime.min, so nothing is cut off
            return None


class TotalValues(BaseModel):
    """Values produced by the total view."""
    model_config = ConfigDict(frozen=True)
    total_on_hand: Number
    total_on_order: Number
    low_stock_count: int


PointValues = Union[TotalValues, CategoryTotals, EntityValues]


class SeriesPoint(NamedTuple):
    taken_at: datetime
    values: PointValues


class SeriesSummary(BaseModel):
    """Start/end/delta of one metric over a filtered series."""
    metric: str
    points: int
    start_at: datetime
    end_at: datetime
    start_value: Number
    end_value: Number
    delta: Number
