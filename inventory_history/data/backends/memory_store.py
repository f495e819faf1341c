from __future__ import annotations

import threading
from typing import Dict, Optional

from ..interface import KeyValueStore


class InMemoryKeyValueStore(KeyValueStore):
    """Dict-backed store for tests and throwaway sessions. Nothing survives the process."""

    def __init__(self, initial: Optional[Dict[str, bytes]] = None) -> None:
        self._data: Dict[str, bytes] = dict(initial or {})
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[bytes]:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: bytes) -> None:
        if not isinstance(value, (bytes, bytearray)):
            raise TypeError(f"value for {key!r} must be bytes, got {type(value).__name__}")
        with self._lock:
            self._data[key] = bytes(value)

    def keys(self) -> list[str]:
        with self._lock:
            return sorted(self._data)
