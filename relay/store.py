from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Tuple, Union

SNAPSHOT_TTL_SECONDS = 24 * 60 * 60
ACTION_TTL_SECONDS = 5 * 60
MAX_NOTIFICATIONS = 8

ACTION_KINDS = ("fold", "check", "call", "raise", "allin")

Clock = Callable[[], float]

# Two independent keyspaces share nothing but the clock: a snapshot write and
# an action write are never atomic with respect to each other.


class _NoChange:
    def __repr__(self) -> str:
        return "NO_CHANGE"


NO_CHANGE = _NoChange()


@dataclass
class SnapshotRecord:
    state: object
    notifications: List[str]
    version: int
    updated_at: str

    def as_payload(self) -> Dict[str, object]:
        return {
            "state": self.state,
            "notifications": list(self.notifications),
            "version": self.version,
            "updatedAt": self.updated_at,
        }


@dataclass
class ActionRecord:
    action: str
    amount: int
    timestamp: int

    def as_payload(self) -> Dict[str, object]:
        return {"action": self.action, "amount": self.amount, "timestamp": self.timestamp}


@dataclass
class _Entry:
    value: object
    expires_at: float


@dataclass
class _ExpiringMap:
    clock: Clock
    entries: Dict[object, _Entry] = field(default_factory=dict)

    def get(self, key: object) -> Optional[object]:
        entry = self.entries.get(key)
        if entry is None:
            return None
        if entry.expires_at <= self.clock():
            del self.entries[key]
            return None
        return entry.value

    def set(self, key: object, value: object, ttl: float) -> None:
        self.entries[key] = _Entry(value=value, expires_at=self.clock() + ttl)

    def delete(self, key: object) -> None:
        self.entries.pop(key, None)

    def purge(self) -> int:
        now = self.clock()
        expired = [key for key, entry in self.entries.items() if entry.expires_at <= now]
        for key in expired:
            del self.entries[key]
        return len(expired)


SnapshotListener = Callable[[str, SnapshotRecord], None]


class SnapshotStore:
    """Latest published state per table, versioned and expiring."""

    def __init__(self, ttl: float = SNAPSHOT_TTL_SECONDS, clock: Clock = time.time) -> None:
        self.ttl = ttl
        self.clock = clock
        self._records = _ExpiringMap(clock)
        self.listeners: List[SnapshotListener] = []

    def publish(self, table_id: str, state: object, notifications: Optional[List[str]] = None) -> SnapshotRecord:
        current = self.get(table_id)
        if notifications is None:
            notifications = list(current.notifications) if current else []
        record = SnapshotRecord(
            state=state,
            notifications=list(notifications)[:MAX_NOTIFICATIONS],
            version=(current.version if current else 0) + 1,
            updated_at=datetime.fromtimestamp(self.clock(), timezone.utc).isoformat(),
        )
        self._records.set(table_id, record, self.ttl)
        for listener in list(self.listeners):
            listener(table_id, record)
        return record

    def get(self, table_id: str) -> Optional[SnapshotRecord]:
        record = self._records.get(table_id)
        return record if isinstance(record, SnapshotRecord) else None

    def read(self, table_id: str, since_version: int = 0) -> Union[SnapshotRecord, _NoChange, None]:
        record = self.get(table_id)
        if record is None:
            return None
        if record.version <= since_version:
            return NO_CHANGE
        return record

    def purge_expired(self) -> int:
        return self._records.purge()


class ActionMailbox:
    """At most one pending action per (table, seat). Reading does not consume."""

    def __init__(self, ttl: float = ACTION_TTL_SECONDS, clock: Clock = time.time) -> None:
        self.ttl = ttl
        self.clock = clock
        self._actions = _ExpiringMap(clock)

    def put(self, table_id: str, seat_index: int, action: str, amount: int = 0) -> ActionRecord:
        if action not in ACTION_KINDS:
            raise ValueError(f"Unsupported action {action}")
        record = ActionRecord(action=action, amount=amount, timestamp=int(self.clock() * 1000))
        self._actions.set(self._key(table_id, seat_index), record, self.ttl)
        return record

    def get(self, table_id: str, seat_index: int) -> Optional[ActionRecord]:
        record = self._actions.get(self._key(table_id, seat_index))
        return record if isinstance(record, ActionRecord) else None

    def delete(self, table_id: str, seat_index: int) -> None:
        self._actions.delete(self._key(table_id, seat_index))

    def purge_expired(self) -> int:
        return self._actions.purge()

    def _key(self, table_id: str, seat_index: int) -> Tuple[str, int]:
        return (table_id, seat_index)
