"""History Store: bounded, persisted snapshot log plus a short update-event log."""
from __future__ import annotations

import threading
from typing import Optional, Tuple, Type, TypeVar

from pydantic import BaseModel, ValidationError

from inventory_history.config import get_config
from inventory_history.data.interface import KeyValueStore
from inventory_history.data.models import (
    EventLog,
    HistoryState,
    Snapshot,
    SnapshotLog,
    UpdateEvent,
)
from inventory_history.errors import InvalidInputError, PersistenceError
from inventory_history.logging import get_logger

from .change_detector import Fingerprint, should_accept

logger = get_logger(__name__)

StateModel = TypeVar("StateModel", bound=BaseModel)


class HistoryStore:
    """Capacity-bounded snapshot history persisted through a key-value port.

    Snapshots and the last accepted fingerprint are written together under
    STATE_KEY, so a failed write can never leave one updated without the other.
    Update events live under EVENTS_KEY.

    Every mutation runs read-modify-evict-persist under one lock and swaps the
    in-memory state only after the port accepted the write.
    """

    STATE_KEY = "inventory_history.state"
    EVENTS_KEY = "inventory_history.events"

    def __init__(
        self,
        kv: KeyValueStore,
        max_snapshots: Optional[int] = None,
        max_events: Optional[int] = None,
    ) -> None:
        config = get_config()
        self.kv = kv
        self.max_snapshots = config.max_snapshots if max_snapshots is None else max_snapshots
        self.max_events = config.max_events if max_events is None else max_events
        if self.max_snapshots < 1 or self.max_events < 1:
            raise ValueError("Retention caps must be at least 1")

        self._lock = threading.RLock()
        self._log: Optional[SnapshotLog] = None
        self._events: Optional[EventLog] = None
        self._closed = False

    # ---------- persistence helpers ----------

    def _read(self, key: str, model: Type[StateModel]) -> StateModel:
        try:
            raw = self.kv.get(key)
        except Exception as e:
            raise PersistenceError(f"Could not read {key!r}: {e}") from e
        if raw is None:
            return model()
        try:
            return model.model_validate_json(raw)
        except ValidationError as e:
            raise PersistenceError(f"Persisted value under {key!r} is corrupt: {e}") from e

    def _write(self, key: str, value: BaseModel) -> None:
        payload = value.model_dump_json().encode("utf-8")
        try:
            self.kv.set(key, payload)
        except Exception as e:
            logger.error(f"Persisting {key!r} failed: {e}")
            raise PersistenceError(f"Could not write {key!r}: {e}") from e

    def _ensure_loaded(self) -> None:
        if self._log is None:
            log = self._read(self.STATE_KEY, SnapshotLog)
            events = self._read(self.EVENTS_KEY, EventLog)
            # Caps may have shrunk since the state was written
            if len(log.snapshots) > self.max_snapshots:
                log = SnapshotLog(snapshots=log.snapshots[-self.max_snapshots:], last_fingerprint=log.last_fingerprint)
            if len(events.events) > self.max_events:
                events = EventLog(events=events.events[:self.max_events])
            self._log, self._events = log, events
            logger.debug(
                f"Loaded history: {len(log.snapshots)} snapshots, {len(events.events)} events"
            )

    def _check_open(self) -> None:
        if self._closed:
            raise PersistenceError("History store is closed")

    # ---------- public API ----------

    def load(self) -> HistoryState:
        """Return the current state, reading persisted state on first use."""
        with self._lock:
            self._ensure_loaded()
            return HistoryState(
                snapshots=list(self._log.snapshots),
                update_events=list(self._events.events),
                last_fingerprint=self._log.last_fingerprint,
            )

    def snapshots(self) -> Tuple[Snapshot, ...]:
        with self._lock:
            self._ensure_loaded()
            return tuple(self._log.snapshots)

    def update_events(self) -> Tuple[UpdateEvent, ...]:
        with self._lock:
            self._ensure_loaded()
            return tuple(self._events.events)

    @property
    def last_fingerprint(self) -> Optional[Fingerprint]:
        with self._lock:
            self._ensure_loaded()
            return self._log.last_fingerprint

    def append(self, snapshot: Snapshot, fingerprint: Fingerprint) -> None:
        """Append `snapshot` as the newest point and remember `fingerprint`.

        Raises:
            InvalidInputError: empty fingerprint, a naive snapshot time, or a snapshot older
                than the newest one kept.
            PersistenceError: the port rejected the write; in-memory state is unchanged.
        """
        if not fingerprint:
            raise InvalidInputError("fingerprint must be a non-empty string")
        if snapshot.taken_at.tzinfo is None:
            raise InvalidInputError("Snapshot time must be timezone-aware")
        with self._lock:
            self._check_open()
            self._ensure_loaded()
            current = self._log.snapshots
            if current and snapshot.taken_at < current[-1].taken_at:
                raise InvalidInputError(
                    f"Snapshot at {snapshot.taken_at.isoformat()} is older than the newest "
                    f"retained snapshot at {current[-1].taken_at.isoformat()}"
                )

            snapshots = [*current, snapshot]
            evicted = max(0, len(snapshots) - self.max_snapshots)
            updated = SnapshotLog(snapshots=snapshots[evicted:], last_fingerprint=fingerprint)
            self._write(self.STATE_KEY, updated)
            self._log = updated

        if evicted:
            logger.debug(f"Evicted {evicted} oldest snapshot(s) (cap {self.max_snapshots})")
        logger.info(
            f"Appended snapshot at {snapshot.taken_at.isoformat()} "
            f"({snapshot.product_count} products, {snapshot.total_on_hand} on hand)"
        )

    def append_if_changed(self, snapshot: Snapshot, fingerprint: Fingerprint) -> bool:
        """Append only when `fingerprint` differs from the last accepted one.

        The comparison and the append happen under the same lock, so two
        overlapping cycles carrying the same data append once.
        """
        with self._lock:
            self._check_open()
            self._ensure_loaded()
            if not should_accept(fingerprint, self._log.last_fingerprint):
                logger.debug(f"Inventory unchanged ({fingerprint[:12]}), skipping append")
                return False
            self.append(snapshot, fingerprint)
            return True

    def record_event(self, event: UpdateEvent) -> None:
        """Prepend `event` to the update log, dropping the oldest beyond the cap."""
        with self._lock:
            self._check_open()
            self._ensure_loaded()
            updated = EventLog(events=[event, *self._events.events][:self.max_events])
            self._write(self.EVENTS_KEY, updated)
            self._events = updated

    def flush(self) -> None:
        """Write the in-memory state back to the port."""
        with self._lock:
            self._check_open()
            if self._log is None:
                return
            self._write(self.STATE_KEY, self._log)
            self._write(self.EVENTS_KEY, self._events)

    def close(self) -> None:
        """Flush and stop accepting writes. Closing twice is a no-op."""
        with self._lock:
            if self._closed:
                return
            self.flush()
            self._closed = True
            close = getattr(self.kv, "close", None)
            if callable(close):
                close()
        logger.debug("History store closed")

    def __enter__(self) -> "HistoryStore":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
