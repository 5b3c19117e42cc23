"""Texas Hold'em table rules: seats, betting rounds, side pots, hand flow."""

from .betting import ActionWindow, BettingRound
from .cards import Card, RANKS, SUITS, build_deck, deal, shuffle
from .evaluator import BestHand, Evaluator, evaluate_best, rank_showdown
from .lifecycle import HandLifecycle
from .messages import describe
from .models import ActionType, Phase, Player, SeatState, Table, TableConfig
from .seats import SeatRegistry
from .settlement import SidePot, build_side_pots, merge_side_pots, settle

__all__ = [
    "ActionWindow",
    "BettingRound",
    "Card",
    "RANKS",
    "SUITS",
    "build_deck",
    "deal",
    "shuffle",
    "BestHand",
    "Evaluator",
    "evaluate_best",
    "rank_showdown",
    "HandLifecycle",
    "describe",
    "ActionType",
    "Phase",
    "Player",
    "SeatState",
    "Table",
    "TableConfig",
    "SeatRegistry",
    "SidePot",
    "build_side_pots",
    "merge_side_pots",
    "settle",
]
