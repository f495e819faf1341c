from .snapshot_builder import build_snapshot, coerce_records, low_stock_entities
from .change_detector import Fingerprint, fingerprint, should_accept
from .store import HistoryStore
from .query_engine import Series, query
from .tracker import CycleResult, InventoryTracker

__all__ = [
    # Snapshot Builder
    "build_snapshot",
    "coerce_records",
    "low_stock_entities",
    # Change Detector
    "Fingerprint",
    "fingerprint",
    "should_accept",
    # History Store
    "HistoryStore",
    # Query Engine
    "Series",
    "query",
    # Polling
    "CycleResult",
    "InventoryTracker",
]
