from __future__ import annotations

import asyncio
import logging
from typing import Callable, Dict, List, Optional

import httpx

LOGGER = logging.getLogger("poker_table")

StateProvider = Callable[[], Dict[str, object]]


class StateReplicator:
    """Client side of the relay: snapshot pushes and mailbox reads for one table.

    Every network failure is logged and swallowed; the next scheduled sync or
    poll is the retry.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        table_id: str,
        state_provider: StateProvider,
        notifications_provider: Callable[[], List[str]] = list,
        sync_delay: float = 0.75,
    ) -> None:
        self.client = client
        self.table_id = table_id
        self.state_provider = state_provider
        self.notifications_provider = notifications_provider
        self.sync_delay = sync_delay
        self.last_version: Optional[int] = None
        self._sync_task: Optional[asyncio.Task] = None

    # Snapshots -------------------------------------------------------

    def queue_sync(self) -> None:
        """Publish soon; calls made while one is already scheduled coalesce."""
        if self._sync_task is not None and not self._sync_task.done():
            return
        self._sync_task = asyncio.get_running_loop().create_task(self._delayed_publish())

    async def flush(self) -> None:
        """Wait for a scheduled publish, if any, to go out."""
        task = self._sync_task
        if task is not None and not task.done():
            await task

    async def close(self) -> None:
        task = self._sync_task
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._sync_task = None

    async def publish(self) -> Optional[int]:
        payload = {
            "tableId": self.table_id,
            "state": self.state_provider(),
            "notifications": self.notifications_provider(),
        }
        try:
            response = await self.client.post("/state", json=payload)
            response.raise_for_status()
            version = int(response.json()["version"])
        except (httpx.HTTPError, ValueError, KeyError) as exc:
            LOGGER.warning("State sync failed for table %s: %s", self.table_id, exc)
            return None
        self.last_version = version
        LOGGER.debug("Table %s published as version %s", self.table_id, version)
        return version

    async def _delayed_publish(self) -> None:
        await asyncio.sleep(self.sync_delay)
        await self.publish()

    # Mailbox ---------------------------------------------------------

    async def fetch_action(self, seat_index: int) -> Optional[Dict[str, object]]:
        try:
            response = await self.client.get("/action", params=self._seat_params(seat_index))
            if response.status_code == 204:
                return None
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            LOGGER.warning("Action fetch failed for seat %s: %s", seat_index, exc)
            return None
        return data if isinstance(data, dict) else None

    async def delete_action(self, seat_index: int) -> None:
        try:
            response = await self.client.delete("/action", params=self._seat_params(seat_index))
            response.raise_for_status()
        except httpx.HTTPError as exc:
            LOGGER.warning("Action delete failed for seat %s: %s", seat_index, exc)

    def _seat_params(self, seat_index: int) -> Dict[str, object]:
        return {"tableId": self.table_id, "seatIndex": seat_index}
