from __future__ import annotations

import random
import time
from typing import Dict, List, Optional

from .betting import BettingRound
from .cards import build_deck, burn, cards_to_codes, deal
from .evaluator import Evaluator, rank_showdown
from .models import PHASE_ORDER, ActionType, Phase, Player, Table
from .seats import SeatRegistry
from .settlement import settle

Event = Dict[str, object]

# Community cards revealed on entering each street.
STREET_CARDS = {Phase.FLOP: 3, Phase.TURN: 1, Phase.RIVER: 1}


class HandLifecycle:
    """Sequences one hand: blinds, streets, betting rounds and the showdown.

    Nothing here blocks or performs I/O. Every step returns the events it
    produced and leaves ``pending_actor`` set when a seat must decide.
    """

    def __init__(
        self,
        table: Table,
        registry: Optional[SeatRegistry] = None,
        evaluator: Evaluator = rank_showdown,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.table = table
        self.rng = rng or random.Random()
        self.registry = registry or SeatRegistry(table, self.rng)
        self.evaluator = evaluator
        self.round: Optional[BettingRound] = None
        self.pending_actor: Optional[Player] = None
        self.hand_in_progress = False

    # Hand start ------------------------------------------------------

    def start_hand(self) -> List[Event]:
        if self.hand_in_progress:
            raise RuntimeError("Hand already in progress")
        table = self.table

        events: List[Event] = []
        for player in table.players:
            player.reset_for_hand()
        table.community.clear()
        table.pot = 0

        events.extend(self.registry.remove_busted())
        if self.registry.is_session_over():
            table.phase = Phase.SHOWDOWN
            return events

        table.hand_number += 1
        for player in table.players:
            player.stats.hands += 1

        table.phase = Phase.PREFLOP
        events.append({"ev": "HAND_START", "hand": table.hand_number})
        events.extend(self.registry.rotate_dealer())
        events.extend(self.registry.assign_blinds())

        table.deck = build_deck(self.rng)
        for player in table.players:
            player.hole_cards = cards_to_codes(deal(table.deck, 2))

        self.hand_in_progress = True
        self._open_round()
        events.extend(self.advance())
        return events

    # Driving ---------------------------------------------------------

    def advance(self) -> List[Event]:
        """Run until a seat must act or the hand is settled."""
        events: List[Event] = []
        self.pending_actor = None
        self.table.active_seat_index = None

        while self.hand_in_progress:
            if len(self.table.in_hand()) < 2:
                events.extend(self._showdown())
                break
            assert self.round is not None
            actor = self.round.next_actor()
            if actor is not None:
                self.pending_actor = actor
                self.table.active_seat_index = actor.seat_index
                events.append({"ev": "TURN", "seat": actor.seat_index, "name": actor.name})
                break
            events.extend(self._next_street())
        return events

    def apply_action(self, seat_index: int, action: object, amount: Optional[int] = None) -> List[Event]:
        if not self.hand_in_progress or self.round is None:
            raise RuntimeError("Hand not active")
        actor = self.pending_actor
        if actor is None or actor.seat_index != seat_index:
            raise RuntimeError("Not your turn")
        try:
            kind = ActionType(action)
        except ValueError:
            raise ValueError(f"Unsupported action {action}") from None

        events = self.round.apply(actor, kind, amount)
        events.extend(self.advance())
        return events

    def _open_round(self) -> None:
        self.round = BettingRound(self.table)
        self.round.start()

    def _next_street(self) -> List[Event]:
        table = self.table
        table.phase = PHASE_ORDER[PHASE_ORDER.index(table.phase) + 1]
        if table.phase == Phase.SHOWDOWN:
            return self._showdown()

        burn(table.deck)
        cards = cards_to_codes(deal(table.deck, STREET_CARDS[table.phase]))
        table.community.extend(cards)
        self._open_round()
        return [{"ev": "PHASE", "phase": table.phase.value, "cards": cards}]

    def _showdown(self) -> List[Event]:
        table = self.table
        table.phase = Phase.SHOWDOWN
        self.round = None
        self.hand_in_progress = False
        self.pending_actor = None
        table.active_seat_index = None
        events = settle(table, self.evaluator)
        events.append({"ev": "HAND_END", "hand": table.hand_number})
        return events

    # Queries ---------------------------------------------------------

    def is_hand_complete(self) -> bool:
        return not self.hand_in_progress

    def is_session_over(self) -> bool:
        return not self.hand_in_progress and self.registry.is_session_over()

    def public_context(self) -> Dict[str, object]:
        """What a bot may look at when deciding."""
        table = self.table
        return {
            "phase": table.phase.value,
            "pot": table.pot,
            "currentBet": table.current_bet,
            "lastRaise": table.last_raise,
            "smallBlind": table.small_blind,
            "bigBlind": table.big_blind,
            "raisesThisRound": table.raises_this_round,
            "community": list(table.community),
            "players": [
                {
                    "seatIndex": p.seat_index,
                    "name": p.name,
                    "chips": p.chips,
                    "roundBet": p.round_bet,
                    "folded": p.folded,
                    "allIn": p.all_in,
                }
                for p in table.players
            ],
        }

    def action_context(self) -> Optional[Dict[str, object]]:
        actor = self.pending_actor
        if actor is None or self.round is None:
            return None
        return self.round.legal_actions(actor).as_context()

    def snapshot_state(self) -> Dict[str, object]:
        table = self.table
        actor = self.pending_actor
        return {
            "phase": table.phase.value,
            "handNumber": table.hand_number,
            "pot": table.pot,
            "currentBet": table.current_bet,
            "lastRaise": table.last_raise,
            "smallBlind": table.small_blind,
            "bigBlind": table.big_blind,
            "raisesThisRound": table.raises_this_round,
            "dealerOrbitCount": table.dealer_orbit_count,
            "communityCards": list(table.community),
            "players": [p.public_state() for p in table.players],
            "activePlayerSeatIndex": table.active_seat_index,
            "actionContext": self.action_context() if actor and not actor.is_bot else None,
            "timestamp": int(time.time() * 1000),
        }
