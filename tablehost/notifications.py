from __future__ import annotations

import asyncio
import logging
from collections import deque
from typing import Callable, Deque, List, Optional

LOGGER = logging.getLogger("poker_table")

DisplayCallback = Callable[[str, List[str]], None]


class NotificationQueue:
    """Paced message display with a short most-recent-first history.

    Producers call ``enqueue`` as often as they like. A single drain task shows
    one message per ``interval`` seconds; each shown message is pushed to the
    front of ``history`` and ``on_display`` is invoked with the message and the
    new history, which is where the host hooks its snapshot publishing.
    """

    def __init__(
        self,
        interval: float = 0.75,
        history_size: int = 8,
        on_display: Optional[DisplayCallback] = None,
    ) -> None:
        if history_size < 1:
            raise ValueError("history_size must be positive")
        self.interval = interval
        self.pending: Deque[str] = deque()
        self._history: Deque[str] = deque(maxlen=history_size)
        self.on_display = on_display
        self._drainer: Optional[asyncio.Task] = None
        self._idle = asyncio.Event()
        self._idle.set()

    @property
    def history(self) -> List[str]:
        return list(self._history)

    def enqueue(self, message: str) -> None:
        self.pending.append(message)
        self._idle.clear()
        if self._drainer is None or self._drainer.done():
            self._drainer = asyncio.get_running_loop().create_task(self._drain())

    async def wait_idle(self) -> None:
        await self._idle.wait()

    async def close(self) -> None:
        if self._drainer is not None and not self._drainer.done():
            self._drainer.cancel()
            try:
                await self._drainer
            except asyncio.CancelledError:
                pass
        self._drainer = None
        self._idle.set()

    def _show_next(self) -> None:
        message = self.pending.popleft()
        self._history.appendleft(message)
        LOGGER.info("%s", message)
        if self.on_display is not None:
            self.on_display(message, self.history)

    async def _drain(self) -> None:
        while self.pending:
            self._show_next()
            await asyncio.sleep(self.interval)
        self._idle.set()
