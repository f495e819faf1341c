# inventory_history/data/interface.py
from __future__ import annotations

from typing import Optional, Protocol, Sequence, runtime_checkable

from .models import InventoryRecord


# ---- Persistence port ----

@runtime_checkable
class KeyValueStore(Protocol):
    """
    Durable key-value contract used by the history store.

    IMPORTANT for crash safety:
    - `set` MUST replace the whole value for a key or leave the previous value intact.
      A reader must never observe a partially written value.
    - Failures are reported by raising; the history store wraps them in PersistenceError.
    """

    def get(self, key: str) -> Optional[bytes]:
        """Return the stored bytes for `key`, or None when nothing was stored."""
        ...

    def set(self, key: str, value: bytes) -> None:
        """Store `value` under `key`, replacing any previous value."""
        ...


# ---- Inventory source (fetch/parse collaborator) ----

@runtime_checkable
class InventorySource(Protocol):
    """Anything that can produce the current inventory records."""

    async def fetch(self) -> Sequence[InventoryRecord]:
        """Fetch and parse the current inventory."""
        ...
