from .records import InventoryRecord, Number

from .snapshots import (
    CategoryTotals,
    EntityValues,
    Snapshot,
    UpdateEvent,
)
from .history_state import (
    SnapshotLog,
    EventLog,
    HistoryState,
)
from .query import (
    TotalView,
    CategoryView,
    EntityView,
    View,
    Window,
    TotalValues,
    PointValues,
    SeriesPoint,
    SeriesSummary,
)

__all__ = [
    # Input records
    "InventoryRecord",
    "Number",
    # Snapshot models
    "CategoryTotals",
    "EntityValues",
    "Snapshot",
    "UpdateEvent",
    # Persisted state
    "SnapshotLog",
    "EventLog",
    "HistoryState",
    # Query models
    "TotalView",
    "CategoryView",
    "EntityView",
    "View",
    "Window",
    "TotalValues",
    "PointValues",
    "SeriesPoint",
    "SeriesSummary",
]
