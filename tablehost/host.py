from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

import httpx

from holdem.evaluator import Evaluator, rank_showdown
from holdem.lifecycle import HandLifecycle
from holdem.messages import describe
from holdem.models import ActionType, Player, Table, TableConfig
from holdem.seats import SeatRegistry

from .bots import BotStrategy, baseline_strategy
from .inputs import LocalInput, RemoteSeatPoller, Submission
from .notifications import NotificationQueue
from .replicator import StateReplicator

LOGGER = logging.getLogger("poker_table")

Event = Dict[str, object]


@dataclass
class HostConfig:
    table_id: str = "default"
    bot_delay: float = 1.0
    transfer_pause: float = 1.0
    poll_interval: float = 0.8
    sync_delay: float = 0.75
    notification_interval: float = 0.75
    notification_history: int = 8


# TableHost is the only thing that touches the engine once seats are filled.
# Exactly one seat is armed at a time; handing the turn over tears down the
# previous seat's local listener and remote poll before the next one starts.


class TableHost:
    """Runs one table: bots decide locally, humans answer locally or via the relay."""

    def __init__(
        self,
        table_config: TableConfig,
        seats: Sequence[Tuple[str, bool]],
        config: Optional[HostConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
        strategy: BotStrategy = baseline_strategy,
        evaluator: Evaluator = rank_showdown,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.config = config or HostConfig()
        self.table = Table(table_config)
        rng = rng or random.Random()
        self.registry = SeatRegistry(self.table, rng)
        self.registry.seat_players(seats)
        self.lifecycle = HandLifecycle(self.table, self.registry, evaluator, rng)
        self.strategy = strategy
        self.notifications = NotificationQueue(
            interval=self.config.notification_interval,
            history_size=self.config.notification_history,
            on_display=self._on_display,
        )
        self.local_input = LocalInput()
        self.replicator: Optional[StateReplicator] = None
        self.poller: Optional[RemoteSeatPoller] = None
        if client is not None:
            self.replicator = StateReplicator(
                client,
                self.config.table_id,
                state_provider=self.lifecycle.snapshot_state,
                notifications_provider=lambda: self.notifications.history,
                sync_delay=self.config.sync_delay,
            )
            self.poller = RemoteSeatPoller(self.replicator, self.config.poll_interval)
        self._remote_task: Optional[asyncio.Task] = None

    # Session ---------------------------------------------------------

    async def run_session(self, max_hands: Optional[int] = None) -> Optional[Player]:
        """Play hands until one player holds every chip (or ``max_hands`` is hit)."""
        played = 0
        try:
            while max_hands is None or played < max_hands:
                if not await self.play_hand():
                    break
                played += 1
            await self.notifications.wait_idle()
            if self.replicator is not None:
                await self.replicator.flush()
                await self.replicator.publish()
        finally:
            await self._cancel_remote()
            self.local_input.disarm()
            await self.notifications.close()
            if self.replicator is not None:
                await self.replicator.close()

        if self.lifecycle.is_session_over() and self.table.players:
            winner = self.table.players[0]
            LOGGER.info("Session over after %s hands: %s wins", self.table.hand_number, winner.name)
            return winner
        return None

    async def play_hand(self) -> bool:
        """Play one hand to settlement. False when the session is already decided."""
        self._emit(self.lifecycle.start_hand())
        if self.lifecycle.is_session_over():
            return False

        LOGGER.info("Hand %s started", self.table.hand_number)
        while not self.lifecycle.is_hand_complete():
            actor = self.lifecycle.pending_actor
            if actor is None:
                raise RuntimeError("Hand in progress with no actor")
            if actor.is_bot:
                action, amount = await self._bot_decision(actor)
            else:
                action, amount = await self._human_decision(actor)

            try:
                events = self.lifecycle.apply_action(actor.seat_index, action, amount)
            except ValueError as exc:
                LOGGER.warning("Rejected %s from %s: %s", action, actor.name, exc)
                if not actor.is_bot:
                    # Ask the same seat again.
                    continue
                # A bot asked again gives the same answer.
                events = self.lifecycle.apply_action(actor.seat_index, ActionType.FOLD)
            self._emit(events)

        LOGGER.info("Hand %s settled", self.table.hand_number)
        await asyncio.sleep(self.config.transfer_pause)
        return True

    # Decisions -------------------------------------------------------

    async def _bot_decision(self, actor: Player) -> Tuple[object, Optional[int]]:
        await asyncio.sleep(self.config.bot_delay)
        context = dict(self.lifecycle.public_context())
        context.update(self.lifecycle.action_context() or {})
        action, amount = self.strategy(actor, context)
        return action, amount

    async def _human_decision(self, actor: Player) -> Tuple[object, Optional[int]]:
        LOGGER.info("Waiting for %s (seat %s)", actor.name, actor.seat_index)
        if self.poller is not None:
            await self.poller.discard_pending(actor.seat_index)
        waiters: List[asyncio.Future] = [self.local_input.arm(actor.seat_index)]
        if self.poller is not None:
            self._remote_task = asyncio.create_task(self.poller.wait_for_action(actor.seat_index))
            waiters.append(self._remote_task)
        try:
            done, _ = await asyncio.wait(waiters, return_when=asyncio.FIRST_COMPLETED)
        finally:
            self.local_input.disarm()
            await self._cancel_remote()

        submission: Submission = next(iter(done)).result()
        amount = submission.get("amount")
        return submission.get("action"), amount if isinstance(amount, int) else None

    async def _cancel_remote(self) -> None:
        task = self._remote_task
        self._remote_task = None
        if task is None or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    # Rendering -------------------------------------------------------

    def submit_local(self, seat_index: int, action: str, amount: Optional[int] = None) -> bool:
        return self.local_input.submit(seat_index, action, amount)

    def _emit(self, events: List[Event]) -> None:
        for event in events:
            LOGGER.debug("event %s", event)
            text = describe(event)
            if text:
                self.notifications.enqueue(text)
        if self.replicator is not None:
            self.replicator.queue_sync()

    def _on_display(self, message: str, history: List[str]) -> None:
        if self.replicator is not None:
            self.replicator.queue_sync()
