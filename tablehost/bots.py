from __future__ import annotations

import random
from typing import Callable, Dict, List, Optional, Tuple

from holdem.models import ActionType, Phase, Player

BotDecision = Tuple[ActionType, Optional[int]]
BotStrategy = Callable[[Player, Dict[str, object]], BotDecision]

_RNG = random.Random()
_RANK_POINTS = {rank: idx for idx, rank in enumerate("23456789TJQKA", start=2)}


def _rough_hand_strength(hole: List[str]) -> int:
    """Very rough proxy for hand quality used to drive aggression choices."""
    if len(hole) < 2:
        return 0

    ranks = [card[0] for card in hole]
    suits = [card[1] for card in hole]
    values = [_RANK_POINTS.get(rank, 2) for rank in ranks]

    score = sum(values)
    if ranks[0] == ranks[1]:
        score += 14
    else:
        gap = abs(values[0] - values[1])
        if gap == 1:
            score += 4
        elif gap == 2:
            score += 2
    if suits[0] == suits[1]:
        score += 3
    if min(values) >= 11:
        score += 2
    return score


def _board_bonus(hole: List[str], community: List[str]) -> int:
    # Pairing the board is worth a lot more than any preflop shape.
    board_ranks = {card[0] for card in community}
    return sum(10 for card in hole if card[0] in board_ranks)


def _should_raise(strength: int, phase: Phase, facing_bet: bool, raises: int, rng: random.Random) -> bool:
    base = 0.15 if facing_bet else 0.3
    phase_bonus = {
        Phase.PREFLOP: 0.0,
        Phase.FLOP: 0.05,
        Phase.TURN: 0.08,
        Phase.RIVER: 0.1,
    }.get(phase, 0.0)
    scaled_strength = min(strength / 50.0, 0.45)
    # Re-raise wars get expensive quickly; back off after each raise.
    probability = max(0.0, min(0.85, base + phase_bonus + scaled_strength) - 0.15 * raises)

    if strength >= 40 and raises < 3:
        return True
    return rng.random() < probability


def _choose_raise_amount(min_raise: int, chips: int, pot: int, rng: random.Random) -> int:
    if chips <= min_raise:
        return chips
    roll = rng.random()
    if roll < 0.5:
        return min_raise
    if roll < 0.9:
        # Something around half the pot on top of the minimum.
        return min(chips, min_raise + pot // 2)
    return chips


def baseline_strategy(player: Player, context: Dict[str, object], rng: Optional[random.Random] = None) -> BotDecision:
    """Mixes calls with occasional raises, biased toward stronger holdings.

    Amounts are chips put in by this action, the same unit a human seat uses.
    """
    rng = rng or _RNG
    need = int(context.get("needToCall", 0))  # type: ignore[arg-type]
    min_raise = int(context.get("minRaise", 0))  # type: ignore[arg-type]
    can_raise = bool(context.get("canRaise"))
    pot = int(context.get("pot", 0))  # type: ignore[arg-type]
    raises = int(context.get("raisesThisRound", 0))  # type: ignore[arg-type]
    phase = Phase(context.get("phase", Phase.PREFLOP.value))
    community = list(context.get("community", []))  # type: ignore[call-overload]

    hole = list(player.hole_cards)
    strength = _rough_hand_strength(hole) + _board_bonus(hole, community)
    facing_bet = need > 0

    if can_raise and hole and _should_raise(strength, phase, facing_bet, raises, rng):
        amount = _choose_raise_amount(min_raise, player.chips, pot, rng)
        if amount >= player.chips:
            return ActionType.ALLIN, None
        return ActionType.RAISE, amount

    if not facing_bet:
        return ActionType.CHECK, None

    # Cheap relative to the stack or decent holding: stay in.
    if need * 4 <= player.chips or strength >= 24:
        return ActionType.CALL, None
    return ActionType.FOLD, None
