from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from .cards import Card


class Phase(str, Enum):
    PREFLOP = "preflop"
    FLOP = "flop"
    TURN = "turn"
    RIVER = "river"
    SHOWDOWN = "showdown"


PHASE_ORDER = [Phase.PREFLOP, Phase.FLOP, Phase.TURN, Phase.RIVER, Phase.SHOWDOWN]


class ActionType(str, Enum):
    FOLD = "fold"
    CHECK = "check"
    CALL = "call"
    RAISE = "raise"
    ALLIN = "allin"


class SeatState(str, Enum):
    TO_ACT = "TO_ACT"
    FOLDED = "FOLDED"
    ALL_IN = "ALL_IN"
    MATCHED = "MATCHED"


@dataclass
class TableConfig:
    starting_stack: int = 2_000
    small_blind: int = 10
    big_blind: int = 20


@dataclass
class PlayerStats:
    hands: int = 0
    hands_won: int = 0
    vpip: int = 0
    pfr: int = 0
    calls: int = 0
    aggressive_acts: int = 0
    showdowns: int = 0
    showdowns_won: int = 0
    folds: int = 0
    folds_preflop: int = 0
    folds_postflop: int = 0
    allins: int = 0


@dataclass
class Player:
    seat_index: int
    name: str
    chips: int
    is_bot: bool = False
    round_bet: int = 0
    total_bet: int = 0
    folded: bool = False
    all_in: bool = False
    dealer: bool = False
    small_blind: bool = False
    big_blind: bool = False
    hole_cards: List[str] = field(default_factory=list)
    stats: PlayerStats = field(default_factory=PlayerStats)

    def place_bet(self, amount: int) -> int:
        """Move up to ``amount`` chips from the stack into the bet; returns the real amount."""
        bet = max(0, min(amount, self.chips))
        self.chips -= bet
        self.round_bet += bet
        self.total_bet += bet
        if self.chips == 0:
            self.all_in = True
        return bet

    def reset_for_hand(self) -> None:
        self.round_bet = 0
        self.total_bet = 0
        self.folded = False
        self.all_in = False
        self.hole_cards.clear()

    def reset_for_round(self) -> None:
        self.round_bet = 0

    def public_state(self) -> Dict[str, object]:
        return {
            "seatIndex": self.seat_index,
            "name": self.name,
            "chips": self.chips,
            "roundBet": self.round_bet,
            "totalBet": self.total_bet,
            "folded": self.folded,
            "allIn": self.all_in,
            "isBot": self.is_bot,
            "dealer": self.dealer,
            "smallBlind": self.small_blind,
            "bigBlind": self.big_blind,
            "cards": list(self.hole_cards),
            "stats": {
                "hands": self.stats.hands,
                "handsWon": self.stats.hands_won,
                "showdowns": self.stats.showdowns,
                "showdownsWon": self.stats.showdowns_won,
            },
        }


@dataclass
class Table:
    """Everything one session mutates: seats, blinds, the current hand."""

    config: TableConfig
    players: List[Player] = field(default_factory=list)
    busted: List[Player] = field(default_factory=list)
    phase: Phase = Phase.PREFLOP
    pot: int = 0
    current_bet: int = 0
    last_raise: int = 0
    raises_this_round: int = 0
    dealer_orbit_count: int = -1
    initial_dealer_seat: Optional[int] = None
    small_blind: int = 0
    big_blind: int = 0
    community: List[str] = field(default_factory=list)
    deck: List[Card] = field(default_factory=list)
    hand_number: int = 0
    active_seat_index: Optional[int] = None

    def __post_init__(self) -> None:
        if not self.small_blind:
            self.small_blind = self.config.small_blind
        if not self.big_blind:
            self.big_blind = self.config.big_blind
        if not self.last_raise:
            self.last_raise = self.big_blind

    def in_hand(self) -> List[Player]:
        return [p for p in self.players if not p.folded]

    def actionable(self) -> List[Player]:
        return [p for p in self.players if not p.folded and not p.all_in]

    def find(self, seat_index: int) -> Optional[Player]:
        for player in self.players:
            if player.seat_index == seat_index:
                return player
        return None

    def index_of(self, flag: str) -> int:
        for idx, player in enumerate(self.players):
            if getattr(player, flag):
                return idx
        raise RuntimeError(f"No player holds the {flag} role")

    def total_chips(self) -> int:
        return sum(p.chips for p in self.players) + self.pot
