"""Shared relay: versioned table snapshots and a per-seat action mailbox."""

from .api import create_app
from .feed import SnapshotFeed
from .store import (
    ACTION_TTL_SECONDS,
    NO_CHANGE,
    SNAPSHOT_TTL_SECONDS,
    ActionMailbox,
    ActionRecord,
    SnapshotRecord,
    SnapshotStore,
)

__all__ = [
    "create_app",
    "SnapshotFeed",
    "ACTION_TTL_SECONDS",
    "NO_CHANGE",
    "SNAPSHOT_TTL_SECONDS",
    "ActionMailbox",
    "ActionRecord",
    "SnapshotRecord",
    "SnapshotStore",
]
