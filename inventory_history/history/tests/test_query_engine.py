from datetime import datetime, timedelta, timezone

import pytest

from inventory_history.data.backends.memory_store import InMemoryKeyValueStore
from inventory_history.data.models import (
    CategoryView,
    EntityView,
    InventoryRecord,
    TotalView,
    Window,
)
from inventory_history.errors import InvalidInputError
from inventory_history.history.change_detector import fingerprint
from inventory_history.history.query_engine import query
from inventory_history.history.snapshot_builder import build_snapshot
from inventory_history.history.store import HistoryStore

DAY1 = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)


def day(n: int, hour: int = 9) -> datetime:
    return DAY1 + timedelta(days=n - 1, hours=hour - 9)


def add(store: HistoryStore, n: int, rows):
    records = [InventoryRecord(**row) for row in rows]
    store.append(build_snapshot(records, day(n)), fingerprint(records))


@pytest.fixture
def store():
    """Three daily snapshots: totals 100, 80, 120; product P appears on day 2."""
    store = HistoryStore(InMemoryKeyValueStore())
    add(store, 1, [
        {"id": "X", "category": "Snacks", "on_hand": 100, "on_order": 5, "reorder_threshold": 10},
    ])
    add(store, 2, [
        {"id": "X", "category": "Snacks", "on_hand": 50, "on_order": 0, "reorder_threshold": 10},
        {"id": "P", "category": "Frozen", "on_hand": 30, "on_order": 0, "reorder_threshold": 10},
    ])
    add(store, 3, [
        {"id": "X", "category": "Snacks", "on_hand": 110, "on_order": 0, "reorder_threshold": 10},
        {"id": "P", "category": "Frozen", "on_hand": 10, "on_order": 20, "reorder_threshold": 10},
    ])
    return store


def test_total_last_two_days(store):
    """Two-day window on day 3 returns exactly days 2 and 3."""
    series = query(store, TotalView(), Window.last_days(2), now=day(3, hour=12))
    assert [(p.taken_at, p.values.total_on_hand) for p in series] == [(day(2), 80), (day(3), 120)]


def test_total_values(store):
    point = query(store, TotalView(), Window.all(), now=day(3)).points()[-1]
    assert point.values.total_on_hand == 120
    assert point.values.total_on_order == 20
    assert point.values.low_stock_count == 1


def test_window_wider_than_history_returns_everything(store):
    series = query(store, TotalView(), Window.last_days(365), now=day(3, hour=12))
    assert [p.values.total_on_hand for p in series] == [100, 80, 120]
    assert len(query(store, TotalView(), now=day(3)).points()) == 3


def test_window_reaching_before_year_one_returns_everything(store):
    """A lookback past the earliest representable date keeps every point."""
    for days in (1_000_000, 1e12):
        series = query(store, TotalView(), Window.last_days(days), now=day(3))
        assert [p.values.total_on_hand for p in series] == [100, 80, 120]


def test_window_boundary_is_inclusive(store):
    """takenAt == now - N days is still inside the window."""
    series = query(store, TotalView(), Window.last_days(1), now=day(3))
    assert [p.taken_at for p in series] == [day(2), day(3)]


def test_category_series_skips_missing(store):
    """Snapshots before a category first appears are absent, not zero."""
    series = query(store, CategoryView(name="Frozen"), Window.all(), now=day(3))
    assert [(p.taken_at, p.values.on_hand, p.values.item_count) for p in series] == [
        (day(2), 30, 1),
        (day(3), 10, 1),
    ]
    assert query(store, CategoryView(name="Nope"), now=day(3)).points() == []


def test_entity_delta_uses_first_present_point(store):
    """An entity first seen on day 2 has delta -20, not -90 from an implied zero."""
    series = query(store, EntityView(id="P"), Window.all(), now=day(3))
    assert [(p.taken_at, p.values.on_hand) for p in series] == [(day(2), 30), (day(3), 10)]

    summary = series.summary()
    assert summary.metric == "on_hand"
    assert summary.points == 2
    assert summary.start_value == 30
    assert summary.end_value == 10
    assert summary.delta == -20
    assert summary.start_at == day(2)


def test_summary_other_metric(store):
    summary = query(store, EntityView(id="P"), now=day(3)).summary("on_order")
    assert summary.delta == 20
    assert query(store, TotalView(), now=day(3)).summary().delta == 20


def test_summary_unknown_metric(store):
    with pytest.raises(InvalidInputError):
        query(store, TotalView(), now=day(3)).summary("on_hand")


def test_empty_series(store):
    """No data in the window is not an error."""
    series = query(store, EntityView(id="ghost"), Window.last_days(1), now=day(3))
    assert series.points() == []
    assert series.summary() is None
    assert series.to_frame().empty


def test_series_is_lazy_and_restartable(store):
    series = query(store, TotalView(), Window.all(), now=day(10))
    first = series.points()
    assert series.points() == first

    add(store, 4, [{"id": "X", "category": "Snacks", "on_hand": 1}])
    assert len(series.points()) == 4


def test_query_does_not_mutate_store(store):
    before = store.load()
    list(query(store, EntityView(id="X"), Window.last_days(2), now=day(3)))
    assert store.load() == before


def test_query_over_plain_snapshots(store):
    snapshots = list(store.snapshots())
    series = query(snapshots, TotalView(), Window.last_days(2), now=day(3, hour=12))
    assert [p.values.total_on_hand for p in series] == [80, 120]


def test_to_frame(store):
    df = query(store, CategoryView(name="Snacks"), now=day(3)).to_frame()
    assert list(df.columns) == ["taken_at", "on_hand", "on_order", "item_count", "low_stock_count"]
    assert df["on_hand"].tolist() == [100, 50, 110]


def test_naive_now_rejected(store):
    with pytest.raises(InvalidInputError):
        query(store, TotalView(), now=datetime(2026, 3, 3))


def test_window_must_be_positive():
    with pytest.raises(ValueError):
        Window.last_days(0)
