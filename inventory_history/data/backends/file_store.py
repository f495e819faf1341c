from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Optional

from ..interface import KeyValueStore

from inventory_history.config import get_config

_SAFE_KEY = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")


class FileKeyValueStore(KeyValueStore):
    """
    Directory-backed implementation.
    - One file per key under `directory` (`<key>.json`).
    - Writes go to a temp file that is fsynced and then moved over the target with
      os.replace, so a crash leaves either the old or the new value on disk.
    - On POSIX the directory is fsynced after the rename so the new entry itself
      survives a power loss.
    """

    def __init__(self, directory: str | Path = None) -> None:
        if directory is None:
            directory = get_config().history_dir
        self.directory = Path(directory)

    def _path_for(self, key: str) -> Path:
        if not _SAFE_KEY.match(key):
            raise ValueError(f"Unsupported key: {key!r}")
        return self.directory / f"{key}.json"

    def get(self, key: str) -> Optional[bytes]:
        path = self._path_for(key)
        if not path.exists():
            return None
        return path.read_bytes()

    def set(self, key: str, value: bytes) -> None:
        path = self._path_for(key)
        self.directory.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_suffix(path.suffix + ".tmp")
        try:
            with open(tmp_path, "wb") as f:
                f.write(value)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, path)
        except BaseException:
            tmp_path.unlink(missing_ok=True)
            raise
        self._sync_directory()

    def _sync_directory(self) -> None:
        # Directories cannot be opened for fsync on Windows
        if os.name == "nt":
            return
        fd = os.open(self.directory, os.O_RDONLY)
        try:
            os.fsync(fd)
        finally:
            os.close(fd)
