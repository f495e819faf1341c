from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from .snapshots import Snapshot, UpdateEvent


class SnapshotLog(BaseModel):
    """Persisted unit for snapshots and the fingerprint they were accepted under.

    Both fields live under one key so a write can never update one without the other.
    """
    snapshots: List[Snapshot] = Field(default_factory=list, description="Snapshots, oldest first")
    last_fingerprint: Optional[str] = Field(default=None, description="Fingerprint of the newest accepted snapshot")


class EventLog(BaseModel):
    """Persisted unit for the update log."""
    events: List[UpdateEvent] = Field(default_factory=list, description="Update events, most recent first")


class HistoryState(BaseModel):
    """Read-only view of the whole history store."""
    snapshots: List[Snapshot] = Field(default_factory=list, description="Snapshots, oldest first")
    update_events: List[UpdateEvent] = Field(default_factory=list, description="Update events, most recent first")
    last_fingerprint: Optional[str] = Field(default=None, description="Fingerprint of the newest accepted snapshot")
