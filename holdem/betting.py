from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Set

from .models import ActionType, Phase, Player, SeatState, Table

Event = Dict[str, object]

# BettingRound owns the turn pointer for one street. It never deals cards or
# settles pots; HandLifecycle decides what happens once next_actor() is None.


@dataclass
class ActionWindow:
    need_to_call: int
    min_raise: int
    can_check: bool
    can_raise: bool
    player_chips: int

    def as_context(self) -> Dict[str, object]:
        return {
            "needToCall": self.need_to_call,
            "minRaise": self.min_raise,
            "canCheck": self.can_check,
            "canRaise": self.can_raise,
            "playerChips": self.player_chips,
        }


class BettingRound:
    """Turn order and bet validation for a single betting round."""

    def __init__(self, table: Table) -> None:
        self.table = table
        self.preflop = table.phase == Phase.PREFLOP
        # Seats that acted since the last qualifying raise.
        self.acted: Set[int] = set()
        self.pointer = 0
        self.skipped = False

    def start(self) -> None:
        table = self.table
        table.raises_this_round = 0
        self.acted.clear()
        if self.preflop:
            # UTG; heads-up this wraps to the dealer, who posted the small blind.
            self.pointer = (table.index_of("big_blind") + 1) % len(table.players)
        else:
            self.pointer = (table.index_of("dealer") + 1) % len(table.players)
            table.current_bet = 0
            table.last_raise = table.big_blind
            for player in table.players:
                player.reset_for_round()
        self.skipped = len(table.in_hand()) < 2 or len(table.actionable()) < 2

    # Turn order ------------------------------------------------------

    def owes_action(self, player: Player) -> bool:
        if player.folded or player.all_in:
            return False
        if player.round_bet < self.table.current_bet:
            return True
        # The option: matched but has not acted since the last raise.
        return player.seat_index not in self.acted and len(self.table.actionable()) >= 2

    def is_complete(self) -> bool:
        if self.skipped or len(self.table.in_hand()) < 2:
            return True
        return not any(self.owes_action(player) for player in self.table.players)

    def next_actor(self) -> Optional[Player]:
        if self.is_complete():
            return None
        players = self.table.players
        for step in range(len(players)):
            idx = (self.pointer + step) % len(players)
            player = players[idx]
            if self.owes_action(player):
                self.pointer = idx
                return player
        return None

    def seat_state(self, player: Player) -> SeatState:
        if player.folded:
            return SeatState.FOLDED
        if player.all_in:
            return SeatState.ALL_IN
        if player.seat_index in self.acted and player.round_bet == self.table.current_bet:
            return SeatState.MATCHED
        return SeatState.TO_ACT

    def legal_actions(self, player: Player) -> ActionWindow:
        need = max(self.table.current_bet - player.round_bet, 0)
        return ActionWindow(
            need_to_call=need,
            min_raise=need + self.table.last_raise,
            can_check=need == 0,
            can_raise=self._may_raise(player, need),
            player_chips=player.chips,
        )

    # Actions ---------------------------------------------------------

    def apply(self, player: Player, action: ActionType, amount: Optional[int]) -> List[Event]:
        if player.folded or player.all_in:
            raise RuntimeError("Seat not active")

        table = self.table
        need = max(table.current_bet - player.round_bet, 0)

        if action == ActionType.FOLD:
            player.folded = True
            event = self._event(ActionType.FOLD, player, 0)
        elif action in (ActionType.CHECK, ActionType.CALL):
            # A check facing a bet is played as a call.
            event = self._call(player, need)
        elif action == ActionType.RAISE:
            if not self._may_raise(player, need):
                event = self._call(player, need)
            else:
                event = self._raise(player, need, _coerce_amount(amount))
        elif action == ActionType.ALLIN:
            if not self._may_raise(player, need) and player.chips > need:
                event = self._call(player, need)
            else:
                event = self._all_in(player, need)
        else:
            raise ValueError(f"Unsupported action {action}")

        self._record_stats(player, ActionType(event["action"]))
        self.acted.add(player.seat_index)
        self.pointer = (table.players.index(player) + 1) % len(table.players)
        return [event]

    def _call(self, player: Player, need: int) -> Event:
        if need == 0:
            return self._event(ActionType.CHECK, player, 0)
        # Short stacks call for less and end up all-in.
        bet = player.place_bet(need)
        self.table.pot += bet
        return self._event(ActionType.CALL, player, bet)

    def _raise(self, player: Player, need: int, requested: int) -> Event:
        min_raise = need + self.table.last_raise
        bet = requested
        if bet < min_raise and bet < player.chips:
            bet = min(player.chips, min_raise)
        if bet >= player.chips:
            return self._all_in(player, need)

        placed = player.place_bet(bet)
        self.table.pot += placed
        self._reopen(player, placed - need)
        return self._event(ActionType.RAISE, player, placed)

    def _all_in(self, player: Player, need: int) -> Event:
        table = self.table
        min_raise = need + table.last_raise
        bet = player.place_bet(player.chips)
        table.pot += bet
        if bet >= min_raise:
            self._reopen(player, bet - need)
        elif player.round_bet > table.current_bet:
            # Short all-in: lifts the bet without reopening action.
            table.current_bet = player.round_bet
        return self._event(ActionType.ALLIN, player, bet)

    def _reopen(self, player: Player, increment: int) -> None:
        table = self.table
        table.current_bet = player.round_bet
        table.last_raise = increment
        table.raises_this_round += 1
        self.acted.clear()

    def _may_raise(self, player: Player, need: int) -> bool:
        return player.chips > need and player.seat_index not in self.acted

    def _event(self, action: ActionType, player: Player, amount: int) -> Event:
        return {
            "ev": "ACTION",
            "action": action.value,
            "seat": player.seat_index,
            "name": player.name,
            "amount": amount,
            "round_bet": player.round_bet,
            "all_in": player.all_in,
            "phase": self.table.phase.value,
        }

    def _record_stats(self, player: Player, action: ActionType) -> None:
        stats = player.stats
        if self.preflop:
            if action in (ActionType.CALL, ActionType.RAISE, ActionType.ALLIN):
                stats.vpip += 1
            if action in (ActionType.RAISE, ActionType.ALLIN):
                stats.pfr += 1
        else:
            if action in (ActionType.RAISE, ActionType.ALLIN):
                stats.aggressive_acts += 1
            if action == ActionType.CALL:
                stats.calls += 1

        if action == ActionType.ALLIN:
            stats.allins += 1
        if action == ActionType.FOLD:
            stats.folds += 1
            if self.preflop:
                stats.folds_preflop += 1
            else:
                stats.folds_postflop += 1


def _coerce_amount(amount: object) -> int:
    if isinstance(amount, bool) or amount is None:
        return 0
    try:
        return max(int(amount), 0)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0
