from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from inventory_history.config import set_config_for_test
from inventory_history.data.models import InventoryRecord
from inventory_history.errors import InvalidInputError
from inventory_history.history.snapshot_builder import build_snapshot, low_stock_entities

NOW = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)


def rec(id, category="Snacks", on_hand=10, on_order=0, reorder_threshold=5, name=None):
    return InventoryRecord(
        id=id, category=category, on_hand=on_hand, on_order=on_order,
        reorder_threshold=reorder_threshold, name=name or f"Product {id}",
    )


def test_totals_and_rollups():
    """Totals, per-category and per-entity values come from one pass over the records."""
    snapshot = build_snapshot(
        [
            rec("A", "Snacks", on_hand=10, on_order=2, reorder_threshold=5),
            rec("B", "Snacks", on_hand=3, on_order=0, reorder_threshold=5),
            rec("C", "Drinks", on_hand=7, on_order=4, reorder_threshold=7),
        ],
        NOW,
    )
    assert snapshot.taken_at == NOW
    assert snapshot.product_count == 3
    assert snapshot.total_on_hand == 20
    assert snapshot.total_on_order == 6
    assert snapshot.low_stock_count == 2

    snacks = snapshot.by_category["Snacks"]
    assert (snacks.on_hand, snacks.on_order, snacks.item_count, snacks.low_stock_count) == (13, 2, 2, 1)
    drinks = snapshot.by_category["Drinks"]
    assert (drinks.on_hand, drinks.on_order, drinks.item_count, drinks.low_stock_count) == (7, 4, 1, 1)

    assert snapshot.by_entity["C"].category == "Drinks"
    assert snapshot.by_entity["C"].name == "Product C"
    assert snapshot.by_entity["A"].reorder_threshold == 5


def test_missing_numbers_count_as_zero():
    """A record without on_order contributes 0 instead of failing."""
    snapshot = build_snapshot(
        [rec("A", on_hand=10, on_order=None), rec("B", on_hand=None, on_order=4)],
        NOW,
    )
    assert snapshot.total_on_hand == 10
    assert snapshot.total_on_order == 4
    assert snapshot.by_entity["A"].on_order == 0
    assert snapshot.by_entity["B"].on_hand == 0


def test_missing_category_uses_default_label():
    """Uncategorized records are grouped once under the default label."""
    snapshot = build_snapshot(
        [rec("A", category=None, on_hand=4), rec("B", category="  ", on_hand=6), rec("C", on_hand=1)],
        NOW,
    )
    assert snapshot.by_category["Uncategorized"].item_count == 2
    assert snapshot.by_category["Uncategorized"].on_hand == 10
    assert snapshot.total_on_hand == 11
    assert snapshot.by_entity["A"].category == "Uncategorized"


def test_default_category_from_config():
    set_config_for_test(_env_file=None, default_category="Misc")
    snapshot = build_snapshot([rec("A", category=None)], NOW)
    assert list(snapshot.by_category) == ["Misc"]


def test_low_stock_needs_threshold():
    """At-threshold counts as low; no threshold never does."""
    snapshot = build_snapshot(
        [
            rec("A", on_hand=5, reorder_threshold=5),
            rec("B", on_hand=0, reorder_threshold=None),
            rec("C", on_hand=6, reorder_threshold=5),
        ],
        NOW,
    )
    assert snapshot.low_stock_count == 1
    assert [entity_id for entity_id, _ in low_stock_entities(snapshot)] == ["A"]


def test_missing_on_hand_is_not_low_stock():
    """A blank quantity is summed as 0 but never compared against the threshold."""
    snapshot = build_snapshot(
        [InventoryRecord(id="A", category="Snacks", on_hand=None, reorder_threshold=10), rec("B", on_hand=2)],
        NOW,
    )
    assert snapshot.by_entity["A"].on_hand == 0
    assert snapshot.by_entity["A"].on_hand_known is False
    assert snapshot.low_stock_count == 1
    assert snapshot.by_category["Snacks"].low_stock_count == 1
    assert [entity_id for entity_id, _ in low_stock_entities(snapshot)] == ["B"]


def test_low_stock_entities_sorted_by_id():
    snapshot = build_snapshot(
        [rec("Z", on_hand=0), rec("M", on_hand=1), rec("A", on_hand=50)],
        NOW,
    )
    assert [entity_id for entity_id, _ in low_stock_entities(snapshot)] == ["M", "Z"]


def test_accepts_mappings():
    """Raw dicts from the parser are validated into records."""
    snapshot = build_snapshot(
        [{"id": "A", "category": "Snacks", "on_hand": 2, "on_order": None, "reorder_threshold": 1}],
        NOW,
    )
    assert snapshot.total_on_hand == 2


def test_empty_records_rejected():
    with pytest.raises(InvalidInputError):
        build_snapshot([], NOW)


def test_missing_identifier_rejected():
    with pytest.raises(InvalidInputError):
        build_snapshot([{"category": "Snacks", "on_hand": 2}], NOW)
    with pytest.raises(InvalidInputError):
        build_snapshot([{"id": "   ", "on_hand": 2}], NOW)


def test_duplicate_identifier_rejected():
    with pytest.raises(InvalidInputError):
        build_snapshot([rec("A"), rec("A", on_hand=3)], NOW)


def test_naive_timestamp_rejected():
    with pytest.raises(InvalidInputError):
        build_snapshot([rec("A")], datetime(2026, 3, 1, 9, 0))


def test_snapshot_is_immutable():
    snapshot = build_snapshot([rec("A")], NOW)
    with pytest.raises(ValidationError):
        snapshot.total_on_hand = 99
