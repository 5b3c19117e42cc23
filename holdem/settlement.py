from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Set

from .evaluator import Evaluator
from .models import Player, Table

Event = Dict[str, object]


@dataclass
class SidePot:
    amount: int
    eligible: List[Player]

    def contenders(self) -> List[Player]:
        return [player for player in self.eligible if not player.folded]


@dataclass
class PotResult:
    players: List[Player]
    amount: int
    hand: Optional[str] = None


def build_side_pots(players: List[Player]) -> List[SidePot]:
    """One pot per distinct total-bet level, smallest level first."""
    contributors = sorted((p for p in players if p.total_bet > 0), key=lambda p: p.total_bet)
    pots: List[SidePot] = []
    previous = 0
    for idx, player in enumerate(contributors):
        level = player.total_bet
        if level > previous:
            eligible = contributors[idx:]
            pots.append(SidePot(amount=(level - previous) * len(eligible), eligible=list(eligible)))
            previous = level
    return pots


def merge_side_pots(pots: List[SidePot]) -> List[SidePot]:
    """Combine neighbouring pots that the same live players can win."""
    merged = [SidePot(amount=pot.amount, eligible=list(pot.eligible)) for pot in pots]
    idx = 0
    while idx < len(merged) - 1:
        here = {p.seat_index for p in merged[idx].contenders()}
        there = {p.seat_index for p in merged[idx + 1].contenders()}
        if here == there:
            merged[idx].amount += merged[idx + 1].amount
            del merged[idx + 1]
        else:
            idx += 1
    return merged


def settle(table: Table, evaluator: Evaluator) -> List[Event]:
    """Pay out ``table.pot`` and return the award events."""
    for player in table.players:
        player.reset_for_round()

    events: List[Event] = []
    in_hand = table.in_hand()

    if len(in_hand) == 1:
        winner = in_hand[0]
        amount = table.pot
        winner.chips += amount
        winner.stats.hands_won += 1
        table.pot = 0
        events.append({"ev": "POT_AWARD", "seat": winner.seat_index, "name": winner.name, "amount": amount})
        events.append({"ev": "WIN", "players": [winner.name], "amount": amount, "hand": None})
        return events

    for player in in_hand:
        player.stats.showdowns += 1
    events.append(
        {
            "ev": "SHOWDOWN",
            "board": list(table.community),
            "hands": [{"seat": p.seat_index, "name": p.name, "cards": list(p.hole_cards)} for p in in_hand],
        }
    )

    credited: Set[int] = set()
    results: List[PotResult] = []

    def credit(player: Player) -> None:
        if player.seat_index in credited:
            return
        credited.add(player.seat_index)
        player.stats.hands_won += 1
        player.stats.showdowns_won += 1

    for pot in merge_side_pots(build_side_pots(table.players)):
        contenders = pot.contenders()
        if len(contenders) <= 1:
            # Nobody to contest it: a refund. An overbet by a folded player goes back to them.
            sole = contenders[0] if contenders else pot.eligible[-1]
            sole.chips += pot.amount
            if contenders:
                credit(sole)
            events.append({"ev": "POT_AWARD", "seat": sole.seat_index, "name": sole.name, "amount": pot.amount})
            results.append(PotResult(players=[sole], amount=pot.amount))
            continue

        hands, winner_idx = evaluator([p.hole_cards + table.community for p in contenders])
        winners = [contenders[i] for i in winner_idx]
        share, remainder = divmod(pot.amount, len(winners))
        for winner in winners:
            payout = share + (1 if remainder > 0 else 0)
            if remainder > 0:
                remainder -= 1
            winner.chips += payout
            credit(winner)
            events.append({"ev": "POT_AWARD", "seat": winner.seat_index, "name": winner.name, "amount": payout})

        hand_name = hands[winner_idx[0]].name if len(winners) == 1 else None
        results.append(PotResult(players=winners, amount=pot.amount, hand=hand_name))

    table.pot = 0
    events.extend(_win_events(results))
    return events


def _win_events(results: List[PotResult]) -> List[Event]:
    # Refunds (single player, nothing evaluated) are not wins.
    reported = [r for r in results if not (len(r.players) == 1 and r.hand is None)]
    if not reported:
        return []

    first = reported[0]
    if all(len(r.players) == 1 and r.players[0] is first.players[0] for r in reported):
        total = sum(r.amount for r in reported)
        return [{"ev": "WIN", "players": [first.players[0].name], "amount": total, "hand": first.hand}]

    return [
        {"ev": "WIN", "players": [p.name for p in r.players], "amount": r.amount, "hand": r.hand}
        for r in reported
    ]
