"""Snapshot Builder: rolls the current inventory records up into one immutable snapshot."""
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from pydantic import ValidationError

from inventory_history.config import get_config
from inventory_history.data.models import (
    CategoryTotals,
    EntityValues,
    InventoryRecord,
    Snapshot,
)
from inventory_history.errors import InvalidInputError

RecordLike = Union[InventoryRecord, Mapping[str, Any]]


def coerce_records(records: Iterable[RecordLike]) -> List[InventoryRecord]:
    """Validate raw mappings into InventoryRecord, passing records through untouched."""
    if records is None:
        raise InvalidInputError("records must be a sequence, got None")
    out: List[InventoryRecord] = []
    for index, record in enumerate(records):
        if isinstance(record, InventoryRecord):
            out.append(record)
            continue
        try:
            out.append(InventoryRecord.model_validate(record))
        except ValidationError as e:
            raise InvalidInputError(f"Record {index} is unusable: {e}") from e
    return out


def build_snapshot(
    records: Iterable[RecordLike],
    now: datetime,
    default_category: Optional[str] = None,
) -> Snapshot:
    """Summarize `records` as observed at `now`.

    Args:
        records: Current inventory, as InventoryRecord instances or mappings.
        now: Observation time; must be timezone-aware.
        default_category: Label for records without a category. Defaults to config.
    Returns:
        Snapshot: totals plus per-category and per-entity rollups.
    Raises:
        InvalidInputError: empty input, an unusable record, a duplicate id, or a naive `now`.
    """
    if now.tzinfo is None:
        raise InvalidInputError("Snapshot time must be timezone-aware")
    if default_category is None:
        default_category = get_config().default_category

    items = coerce_records(records)
    if not items:
        raise InvalidInputError("Cannot build a snapshot from zero inventory records")

    total_on_hand = 0
    total_on_order = 0
    low_stock_count = 0
    categories: Dict[str, Dict[str, Any]] = {}
    entities: Dict[str, EntityValues] = {}

    for item in items:
        if item.id in entities:
            raise InvalidInputError(f"Duplicate product id in one fetch: {item.id!r}")

        on_hand = item.on_hand or 0
        on_order = item.on_order or 0
        category = item.category or default_category
        entity = EntityValues(
            on_hand=on_hand,
            on_order=on_order,
            reorder_threshold=item.reorder_threshold,
            category=category,
            name=item.name,
            on_hand_known=item.on_hand is not None,
        )
        # Low stock needs both a quantity and a threshold from the source row
        low = entity.is_low_stock

        total_on_hand += on_hand
        total_on_order += on_order
        low_stock_count += int(low)

        bucket = categories.setdefault(
            category, {"on_hand": 0, "on_order": 0, "item_count": 0, "low_stock_count": 0}
        )
        bucket["on_hand"] += on_hand
        bucket["on_order"] += on_order
        bucket["item_count"] += 1
        bucket["low_stock_count"] += int(low)

        entities[item.id] = entity

    return Snapshot(
        taken_at=now,
        product_count=len(entities),
        total_on_hand=total_on_hand,
        total_on_order=total_on_order,
        low_stock_count=low_stock_count,
        by_category={name: CategoryTotals(**totals) for name, totals in categories.items()},
        by_entity=entities,
    )


def low_stock_entities(snapshot: Snapshot) -> List[tuple[str, EntityValues]]:
    """Products at or below their reorder threshold, sorted by id."""
    return sorted(
        ((entity_id, values) for entity_id, values in snapshot.by_entity.items() if values.is_low_stock),
        key=lambda pair: pair[0],
    )
