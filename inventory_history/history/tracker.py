"""Inventory tracker.

Runs fetch -> build -> detect -> append cycles on an asyncio task.
Only the fetch awaits; everything after it is synchronous, so no other
coroutine can interleave between the change decision and the write.

Usage:
    store = HistoryStore(get_kv_store())
    tracker = InventoryTracker(store, get_inventory_source())
    tracker.start()  # Non-blocking, spawns background task
    ...
    await tracker.aclose()
    store.close()
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional

from inventory_history.config import get_config
from inventory_history.data.interface import InventorySource
from inventory_history.data.models import Snapshot, UpdateEvent
from inventory_history.logging import get_logger

from .change_detector import Fingerprint, fingerprint
from .snapshot_builder import build_snapshot, coerce_records
from .store import HistoryStore

logger = get_logger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class CycleResult:
    accepted: bool
    fingerprint: Fingerprint
    snapshot: Snapshot


class InventoryTracker:
    """Background poller feeding a HistoryStore.

    Polls every `poll_interval` seconds (config default: 5 minutes).
    """

    def __init__(
        self,
        store: HistoryStore,
        source: InventorySource,
        *,
        poll_interval: Optional[float] = None,
        default_category: Optional[str] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        config = get_config()
        self.store = store
        self.source = source
        self.poll_interval = config.poll_interval_seconds if poll_interval is None else poll_interval
        self.default_category = default_category or config.default_category
        self.clock = clock
        self._task: asyncio.Task | None = None

    async def run_cycle(self) -> CycleResult:
        """Fetch once and append when the inventory changed.

        A fetch that raises or is cancelled leaves the store untouched.
        """
        fetched = await self.source.fetch()

        # No awaits past this point
        records = coerce_records(fetched)
        snapshot = build_snapshot(records, self.clock(), default_category=self.default_category)
        current = fingerprint(records)
        accepted = self.store.append_if_changed(snapshot, current)
        if accepted:
            self.store.record_event(
                UpdateEvent(
                    observed_at=snapshot.taken_at,
                    product_count=snapshot.product_count,
                    total_stock=snapshot.total_on_hand,
                )
            )
        return CycleResult(accepted=accepted, fingerprint=current, snapshot=snapshot)

    def start(self) -> None:
        """Start polling as a background task."""
        if self._task and not self._task.done():
            logger.warning("Inventory tracker already running")
            return
        self._task = asyncio.create_task(self._run_loop())
        logger.info(f"Inventory tracker started (interval={self.poll_interval}s)")

    def stop(self) -> None:
        """Cancel future cycles, including one that is mid-fetch."""
        if self._task and not self._task.done():
            self._task.cancel()
            logger.info("Inventory tracker stopped")

    async def aclose(self) -> None:
        """Stop and wait for the background task to finish."""
        self.stop()
        if self._task is not None:
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def _run_loop(self) -> None:
        """Main polling loop."""
        while True:
            try:
                result = await self.run_cycle()
                if not result.accepted:
                    logger.debug("Inventory unchanged since last poll")
            except asyncio.CancelledError:
                break
            except Exception:
                logger.exception("Inventory cycle failed")
            await asyncio.sleep(self.poll_interval)
