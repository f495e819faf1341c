"""Query Engine: projects stored snapshots into time series for one view and window."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, Iterator, List, Optional, Union

import pandas as pd

from inventory_history.data.models import (
    CategoryView,
    EntityView,
    PointValues,
    SeriesPoint,
    SeriesSummary,
    Snapshot,
    TotalValues,
    TotalView,
    View,
    Window,
)
from inventory_history.errors import InvalidInputError

from .store import HistoryStore

SnapshotSource = Union[HistoryStore, Iterable[Snapshot]]


class Series:
    """Lazy, restartable series of (taken_at, values) points.

    Nothing is read until iteration; every new iteration re-reads the source,
    so a series held by the presentation layer picks up later appends.
    """

    def __init__(self, source: SnapshotSource, view: View, window: Window, now: datetime) -> None:
        self.source = source
        self.view = view
        self.window = window
        self.now = now

    def _snapshots(self) -> Iterable[Snapshot]:
        if isinstance(self.source, HistoryStore):
            return self.source.snapshots()
        return tuple(self.source)

    def _project(self, snapshot: Snapshot) -> Optional[PointValues]:
        view = self.view
        if isinstance(view, TotalView):
            return TotalValues(
                total_on_hand=snapshot.total_on_hand,
                total_on_order=snapshot.total_on_order,
                low_stock_count=snapshot.low_stock_count,
            )
        if isinstance(view, CategoryView):
            return snapshot.by_category.get(view.name)
        if isinstance(view, EntityView):
            return snapshot.by_entity.get(view.id)
        raise InvalidInputError(f"Unknown view: {view!r}")

    def __iter__(self) -> Iterator[SeriesPoint]:
        start = self.window.start(self.now)
        for snapshot in self._snapshots():
            if start is not None and snapshot.taken_at < start:
                continue
            values = self._project(snapshot)
            # Snapshots predating a category or product are skipped, not zero-filled
            if values is None:
                continue
            yield SeriesPoint(snapshot.taken_at, values)

    def points(self) -> List[SeriesPoint]:
        return list(self)

    def default_metric(self) -> str:
        return "total_on_hand" if isinstance(self.view, TotalView) else "on_hand"

    def summary(self, metric: Optional[str] = None) -> Optional[SeriesSummary]:
        """Start, end and delta of `metric` over the filtered points.

        Returns None for an empty series. The start value is the first point
        actually present, never an implied zero.
        """
        metric = metric or self.default_metric()
        points = self.points()
        if not points:
            return None
        first, last = points[0], points[-1]
        if not hasattr(first.values, metric):
            raise InvalidInputError(f"{type(first.values).__name__} has no metric {metric!r}")
        start_value = getattr(first.values, metric)
        end_value = getattr(last.values, metric)
        return SeriesSummary(
            metric=metric,
            points=len(points),
            start_at=first.taken_at,
            end_at=last.taken_at,
            start_value=start_value,
            end_value=end_value,
            delta=end_value - start_value,
        )

    def to_frame(self) -> pd.DataFrame:
        """One row per point: taken_at plus the value fields."""
        rows = [{"taken_at": point.taken_at, **point.values.model_dump()} for point in self]
        if not rows:
            return pd.DataFrame(columns=["taken_at"])
        return pd.DataFrame(rows)


def query(
    source: SnapshotSource,
    view: View,
    window: Optional[Window] = None,
    now: Optional[datetime] = None,
) -> Series:
    """Build a series for `view` over `window`, measured back from `now` (default: current UTC time)."""
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        raise InvalidInputError("Query time must be timezone-aware")
    return Series(source, view, window or Window.all(), now)
