from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Optional, Set

import websockets
from websockets.asyncio.server import ServerConnection

from .api import DEFAULT_TABLE
from .store import ACTION_KINDS, ActionMailbox, SnapshotRecord, SnapshotStore

LOGGER = logging.getLogger("poker_relay")

# Push alternative to polling GET /state: subscribers get every new version of
# their table as it is published, and seat owners can drop actions into the
# same mailbox the HTTP surface uses.


@dataclass(eq=False)
class Subscriber:
    websocket: ServerConnection
    table_id: str
    seat_index: Optional[int] = None
    last_version: int = 0
    pending: "asyncio.Queue[SnapshotRecord]" = field(default_factory=asyncio.Queue)


class SnapshotFeed:
    def __init__(self, store: SnapshotStore, mailbox: ActionMailbox) -> None:
        self.store = store
        self.mailbox = mailbox
        self.subscribers: Dict[str, Set[Subscriber]] = {}
        store.listeners.append(self._on_publish)

    async def start(self, host: str = "0.0.0.0", port: int = 8765) -> None:
        async with websockets.serve(self.handle_connection, host, port):
            LOGGER.info("Snapshot feed listening on %s:%s", host, port)
            await asyncio.Future()

    async def handle_connection(self, websocket: ServerConnection) -> None:
        hello = await self._read_message(websocket)
        if hello is None or hello.get("type") != "hello":
            await self._send_error(websocket, code="BAD_HELLO", msg="Expected hello")
            await websocket.close()
            return

        table_id = hello.get("tableId") or DEFAULT_TABLE
        since = hello.get("sinceVersion", 0)
        seat_index = hello.get("seatIndex")
        if not isinstance(table_id, str):
            await self._send_error(websocket, code="BAD_SCHEMA", msg="tableId must be a string")
            await websocket.close()
            return
        if not _is_int(since) or (seat_index is not None and not _is_int(seat_index)):
            await self._send_error(websocket, code="BAD_SCHEMA", msg="sinceVersion and seatIndex must be integers")
            await websocket.close()
            return

        sub = Subscriber(websocket=websocket, table_id=table_id, seat_index=seat_index, last_version=since)
        self.subscribers.setdefault(table_id, set()).add(sub)
        LOGGER.info("Feed subscriber joined table %s (seat=%s, since=%s)", table_id, seat_index, since)

        current = self.store.get(table_id)
        await self._send_json(websocket, "welcome", {
            "tableId": table_id,
            "seatIndex": seat_index,
            "version": current.version if current else 0,
        })
        if current is not None:
            sub.pending.put_nowait(current)

        pump = asyncio.create_task(self._pump(sub))
        try:
            async for raw in websocket:
                message = self._decode(raw)
                if message.get("type") == "action":
                    await self._handle_action(sub, message)
                elif not message:
                    await self._send_error(websocket, code="BAD_SCHEMA", msg="Invalid JSON")
                else:
                    await self._send_error(websocket, code="UNKNOWN_TYPE", msg="Unsupported message type")
        except websockets.ConnectionClosed:
            pass
        finally:
            pump.cancel()
            try:
                await pump
            except asyncio.CancelledError:
                pass
            self._unsubscribe(sub)
        LOGGER.info("Feed subscriber left table %s", table_id)

    async def _handle_action(self, sub: Subscriber, message: Dict[str, object]) -> None:
        if sub.seat_index is None:
            await self._send_error(sub.websocket, code="BAD_SCHEMA", msg="seatIndex required in hello")
            return
        action = message.get("action")
        amount = message.get("amount", 0)
        if action not in ACTION_KINDS:
            await self._send_error(sub.websocket, code="INVALID_ACTION", msg="Missing or invalid action")
            return
        if amount is None:
            amount = 0
        if not _is_int(amount):
            await self._send_error(sub.websocket, code="INVALID_ACTION", msg="amount must be an integer")
            return
        record = self.mailbox.put(sub.table_id, sub.seat_index, str(action), amount)  # type: ignore[arg-type]
        await self._send_json(sub.websocket, "ack", record.as_payload())

    def _on_publish(self, table_id: str, record: SnapshotRecord) -> None:
        for sub in self.subscribers.get(table_id, ()):
            sub.pending.put_nowait(record)

    async def _pump(self, sub: Subscriber) -> None:
        while True:
            record = await sub.pending.get()
            if record.version <= sub.last_version:
                continue
            sub.last_version = record.version
            await self._send_json(sub.websocket, "snapshot", {"tableId": sub.table_id, **record.as_payload()})

    def _unsubscribe(self, sub: Subscriber) -> None:
        peers = self.subscribers.get(sub.table_id)
        if not peers:
            return
        peers.discard(sub)
        if not peers:
            del self.subscribers[sub.table_id]

    async def _send_json(self, websocket: ServerConnection, msg_type: str, payload: Dict[str, object]) -> None:
        try:
            await websocket.send(self._envelope(msg_type, payload))
        except websockets.ConnectionClosed:
            LOGGER.debug("Dropped %s for closed connection", msg_type)

    async def _send_error(self, websocket: ServerConnection, code: str, msg: str) -> None:
        await self._send_json(websocket, "error", {"code": code, "msg": msg})

    def _envelope(self, msg_type: str, payload: Dict[str, object]) -> str:
        body = {"type": msg_type, "v": 1, "ts": datetime.now(timezone.utc).isoformat()}
        body.update(payload)
        return json.dumps(body)

    async def _read_message(self, websocket: ServerConnection) -> Optional[Dict[str, object]]:
        try:
            raw = await asyncio.wait_for(websocket.recv(), timeout=5)
        except (asyncio.TimeoutError, websockets.ConnectionClosed):
            return None
        return self._decode(raw) or None

    def _decode(self, raw: object) -> Dict[str, object]:
        try:
            message = json.loads(raw)  # type: ignore[arg-type]
        except (TypeError, json.JSONDecodeError):
            return {}
        return message if isinstance(message, dict) else {}


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)
