from __future__ import annotations

import asyncio
import logging
from typing import Dict, Optional

from .replicator import StateReplicator

LOGGER = logging.getLogger("poker_table")

Submission = Dict[str, object]


class LocalInput:
    """Action source for the keyboard (or any in-process caller).

    Only the seat currently armed by the host may submit; anything else is a
    stale click from a previous turn and is dropped.
    """

    def __init__(self) -> None:
        self.armed_seat: Optional[int] = None
        self._future: Optional[asyncio.Future] = None

    def arm(self, seat_index: int) -> asyncio.Future:
        self.disarm()
        self.armed_seat = seat_index
        self._future = asyncio.get_running_loop().create_future()
        return self._future

    def disarm(self) -> None:
        if self._future is not None and not self._future.done():
            self._future.cancel()
        self._future = None
        self.armed_seat = None

    def is_waiting(self, seat_index: int) -> bool:
        future = self._future
        return future is not None and not future.done() and seat_index == self.armed_seat

    def submit(self, seat_index: int, action: str, amount: Optional[int] = None) -> bool:
        if not self.is_waiting(seat_index):
            LOGGER.warning("Ignoring %s from seat %s: not its turn", action, seat_index)
            return False
        assert self._future is not None
        self._future.set_result({"action": action, "amount": amount})
        return True


class RemoteSeatPoller:
    """Polls the relay mailbox for one seat until an action shows up."""

    def __init__(self, replicator: StateReplicator, interval: float = 0.8) -> None:
        self.replicator = replicator
        self.interval = interval

    async def discard_pending(self, seat_index: int) -> None:
        """Drop anything posted for the seat before its turn began."""
        await self.replicator.delete_action(seat_index)

    async def wait_for_action(self, seat_index: int) -> Submission:
        while True:
            record = await self.replicator.fetch_action(seat_index)
            if record and record.get("action"):
                # Not atomic with the read; a newer submission landing in between is lost.
                await self.replicator.delete_action(seat_index)
                LOGGER.info("Remote action for seat %s: %s", seat_index, record)
                return {"action": record["action"], "amount": record.get("amount") or 0}
            await asyncio.sleep(self.interval)
