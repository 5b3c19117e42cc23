"""Default hand evaluator.

The engine only depends on the ``Evaluator`` call signature: given one list of
card codes per contender it returns each contender's best hand and the
indexes of the winners, in the order the evaluator reports them. Any other
ranking library can be plugged in with a small adapter.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from .cards import Card, parse_code

RANK_VALUE = {rank: idx for idx, rank in enumerate("23456789TJQKA", start=2)}

CATEGORY_NAMES = {
    9: "Royal Flush",
    8: "Straight Flush",
    7: "Four of a Kind",
    6: "Full House",
    5: "Flush",
    4: "Straight",
    3: "Three of a Kind",
    2: "Two Pair",
    1: "Pair",
    0: "High Card",
}

Score = Tuple[int, List[int]]


@dataclass(frozen=True)
class BestHand:
    score: Score
    cards: Tuple[str, ...]

    @property
    def name(self) -> str:
        return describe_rank(self.score)


Evaluator = Callable[[Sequence[Sequence[str]]], Tuple[List[BestHand], List[int]]]


def describe_rank(score: Score) -> str:
    category, kickers = score
    if category == 8 and kickers and kickers[0] == 14:
        return CATEGORY_NAMES[9]
    return CATEGORY_NAMES[category]


def evaluate_best(cards: Sequence[Card]) -> Score:
    """Return a strength tuple for 5 to 7 cards. Higher is better."""
    best: Optional[Score] = None
    for combo in itertools.combinations(cards, 5):
        rank = _evaluate_five(combo)
        if best is None or rank > best:
            best = rank
    if best is None:
        raise ValueError("At least five cards are required")
    return best


def solve(codes: Sequence[str]) -> BestHand:
    return BestHand(score=evaluate_best([parse_code(code) for code in codes]), cards=tuple(codes))


def rank_showdown(hands: Sequence[Sequence[str]]) -> Tuple[List[BestHand], List[int]]:
    """Evaluate every contender; winners are reported in input order."""
    solved = [solve(codes) for codes in hands]
    if not solved:
        return [], []
    top = max(hand.score for hand in solved)
    winners = [idx for idx, hand in enumerate(solved) if hand.score == top]
    return solved, winners


def _evaluate_five(cards: Sequence[Card]) -> Score:
    ranks = sorted((RANK_VALUE[card.rank] for card in cards), reverse=True)
    suits = [card.suit for card in cards]

    is_flush = len(set(suits)) == 1
    straight_high = _straight_high(cards)

    counts = {}
    for card in cards:
        counts.setdefault(card.rank, 0)
        counts[card.rank] += 1

    ordered_counts = sorted(counts.items(), key=lambda x: (x[1], RANK_VALUE[x[0]]), reverse=True)
    count_values = sorted(counts.values(), reverse=True)

    if straight_high and is_flush:
        return (8, [straight_high])
    if count_values[0] == 4:
        four_rank = RANK_VALUE[ordered_counts[0][0]]
        kicker = max(RANK_VALUE[r] for r, c in ordered_counts if r != ordered_counts[0][0])
        return (7, [four_rank, kicker])
    if count_values[0] == 3 and count_values[1] == 2:
        trips = RANK_VALUE[ordered_counts[0][0]]
        pair = RANK_VALUE[ordered_counts[1][0]]
        return (6, [trips, pair])
    if is_flush:
        return (5, ranks)
    if straight_high:
        return (4, [straight_high])
    if count_values[0] == 3:
        trips_rank = RANK_VALUE[ordered_counts[0][0]]
        kickers = [RANK_VALUE[r] for r, c in ordered_counts[1:]]
        return (3, [trips_rank] + kickers)
    if count_values[0] == 2 and count_values[1] == 2:
        pair_high = RANK_VALUE[ordered_counts[0][0]]
        pair_low = RANK_VALUE[ordered_counts[1][0]]
        kicker = max(RANK_VALUE[r] for r, c in ordered_counts if c == 1)
        return (2, [pair_high, pair_low, kicker])
    if count_values[0] == 2:
        pair_rank = RANK_VALUE[ordered_counts[0][0]]
        kickers = [RANK_VALUE[r] for r, c in ordered_counts[1:]]
        return (1, [pair_rank] + kickers)
    return (0, ranks)


def _straight_high(cards: Iterable[Card]) -> Optional[int]:
    ranks = {RANK_VALUE[card.rank] for card in cards}
    if 14 in ranks:  # wheel
        ranks.add(1)
    ordered = sorted(ranks, reverse=True)
    for idx in range(len(ordered) - 4):
        window = ordered[idx : idx + 5]
        if window[0] - window[-1] == 4:
            return window[0]
    return None
