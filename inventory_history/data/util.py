from __future__ import annotations

from pathlib import Path
from typing import Literal, Optional

from .backends.csv_source import CsvInventorySource
from .backends.file_store import FileKeyValueStore
from .backends.memory_store import InMemoryKeyValueStore
from .interface import InventorySource, KeyValueStore

from inventory_history.config import get_config


def get_kv_store(kind: Optional[Literal["file", "memory"]] = None) -> KeyValueStore:
    config = get_config()
    kind = kind or config.kv_backend
    if kind == "file":
        # Persists under the configured history folder
        return FileKeyValueStore(directory=config.history_dir)
    if kind == "memory":
        return InMemoryKeyValueStore()
    raise ValueError(f"Unknown key-value store kind: {kind}")


def get_inventory_source(kind: Literal["csv"] = "csv") -> InventorySource:
    if kind == "csv":
        # Reads the configured inventory export from the data folder
        config = get_config()
        return CsvInventorySource(Path(config.data_dir) / config.inventory_file)
    raise ValueError(f"Unknown inventory source kind: {kind}")
