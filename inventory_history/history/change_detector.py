"""Change Detector: order-insensitive fingerprint of the fields that define a change."""
from __future__ import annotations

import hashlib
import json
from typing import Iterable, Optional

from inventory_history.data.models import InventoryRecord, Number

from .snapshot_builder import RecordLike, coerce_records

Fingerprint = str


def _normalize(value: Optional[Number]) -> float:
    # 5 and 5.0 must digest identically; missing counts as 0
    return float(value or 0)


def fingerprint(records: Iterable[RecordLike]) -> Fingerprint:
    """SHA-256 over the sorted (id, on_hand, on_order) projection of `records`."""
    items: list[InventoryRecord] = coerce_records(records)
    projection = sorted(
        (item.id, _normalize(item.on_hand), _normalize(item.on_order)) for item in items
    )
    payload = json.dumps(projection, separators=(",", ":"), ensure_ascii=True)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def should_accept(current: Fingerprint, previous: Optional[Fingerprint]) -> bool:
    """True on the first observation or whenever the fingerprint moved."""
    return previous is None or current != previous
