from __future__ import annotations

import random
from typing import Iterable, List, Optional, Sequence, Tuple

from holdem.lifecycle import HandLifecycle
from holdem.models import ActionType, Player, Table, TableConfig
from holdem.seats import SeatRegistry


def create_table(
    stacks: Sequence[int],
    *,
    sb: int = 10,
    bb: int = 20,
    names: Optional[Sequence[str]] = None,
) -> Table:
    """A table with one player per stack, seat indexes 0..n-1."""
    table = Table(TableConfig(starting_stack=max(stacks), small_blind=sb, big_blind=bb))
    labels = list(names) if names else [f"Player{idx}" for idx in range(len(stacks))]
    SeatRegistry(table).seat_players([(label, False) for label in labels])
    for player, chips in zip(table.players, stacks):
        player.chips = chips
    return table


def create_lifecycle(
    stacks: Sequence[int],
    *,
    sb: int = 10,
    bb: int = 20,
    seed: int = 42,
    dealer_seat: int = 0,
) -> HandLifecycle:
    """Lifecycle whose first dealer is ``dealer_seat`` instead of a random seat."""
    table = create_table(stacks, sb=sb, bb=bb)
    table.initial_dealer_seat = dealer_seat
    table.players = table.players[dealer_seat:] + table.players[:dealer_seat]
    rng = random.Random(seed)
    return HandLifecycle(table, SeatRegistry(table, rng), rng=rng)


def perform_actions(lifecycle: HandLifecycle, actions: Iterable[Tuple[int, ActionType, Optional[int]]]) -> List[dict]:
    """Apply a scripted sequence of (seat, action, amount); returns all events."""
    events: List[dict] = []
    for seat_idx, action, amount in actions:
        events.extend(lifecycle.apply_action(seat_idx, action, amount))
    return events


def passive_action(lifecycle: HandLifecycle) -> List[dict]:
    """Check when possible, otherwise call."""
    actor = lifecycle.pending_actor
    assert actor is not None
    context = lifecycle.action_context()
    assert context is not None
    action = ActionType.CHECK if context["canCheck"] else ActionType.CALL
    return lifecycle.apply_action(actor.seat_index, action, None)


def auto_complete_hand(lifecycle: HandLifecycle) -> List[dict]:
    events: List[dict] = []
    while lifecycle.hand_in_progress:
        events.extend(passive_action(lifecycle))
    return events


def fold_around(lifecycle: HandLifecycle) -> List[dict]:
    """Everyone folds in turn until the hand is awarded."""
    events: List[dict] = []
    while lifecycle.hand_in_progress:
        actor = lifecycle.pending_actor
        assert actor is not None
        events.extend(lifecycle.apply_action(actor.seat_index, ActionType.FOLD))
    return events


def all_chips(table: Table) -> int:
    return table.total_chips() + sum(p.chips for p in table.busted)


def seat(table: Table, seat_index: int) -> Player:
    player = table.find(seat_index)
    assert player is not None
    return player


def events_of(events: Iterable[dict], kind: str) -> List[dict]:
    return [event for event in events if event.get("ev") == kind]
