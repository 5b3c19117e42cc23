from __future__ import annotations

import random
from typing import Dict, List, Optional, Sequence, Tuple

from .models import Player, Table

Event = Dict[str, object]


class SeatRegistry:
    """Seat membership, dealer button, blinds and bust-outs for one table."""

    def __init__(self, table: Table, rng: Optional[random.Random] = None) -> None:
        self.table = table
        self.rng = rng or random.Random()

    # Seating ---------------------------------------------------------

    def seat_players(self, specs: Sequence[Tuple[str, bool]]) -> List[Player]:
        if len(specs) < 2:
            raise ValueError("At least two players are required")
        if self.table.players or self.table.busted:
            raise RuntimeError("Seats can only be filled once per session")

        for seat_index, (name, is_bot) in enumerate(specs):
            display = name.strip()
            if not display:
                raise ValueError("Player name required")
            self.table.players.append(
                Player(
                    seat_index=seat_index,
                    name=display,
                    chips=self.table.config.starting_stack,
                    is_bot=is_bot,
                )
            )
        return list(self.table.players)

    # Dealer / blinds -------------------------------------------------

    def rotate_dealer(self) -> List[Event]:
        table = self.table
        players = table.players
        if not players:
            raise RuntimeError("No players seated")

        holder = next((idx for idx, p in enumerate(players) if p.dealer), None)
        if table.initial_dealer_seat is None and holder is None:
            next_idx = self.rng.randrange(len(players))
            table.initial_dealer_seat = players[next_idx].seat_index
        elif holder is None:
            # Previous dealer busted: the seat that followed them already sits at position 0.
            next_idx = 0
        else:
            players[holder].dealer = False
            next_idx = (holder + 1) % len(players)

        players[next_idx].dealer = True
        # Rotate so the dealer is first; relative order is preserved.
        table.players = players[next_idx:] + players[:next_idx]
        dealer = table.players[0]
        return [{"ev": "DEALER", "seat": dealer.seat_index, "name": dealer.name}]

    def assign_blinds(self) -> List[Event]:
        table = self.table
        players = table.players
        if len(players) < 2:
            raise RuntimeError("Not enough players for blinds")

        events: List[Event] = []
        if players[0].seat_index == table.initial_dealer_seat:
            table.dealer_orbit_count += 1
            if table.dealer_orbit_count > 0 and table.dealer_orbit_count % 2 == 0:
                table.small_blind *= 2
                table.big_blind *= 2
                events.append({"ev": "BLINDS_UP", "sb": table.small_blind, "bb": table.big_blind})

        for player in players:
            player.small_blind = False
            player.big_blind = False

        heads_up = len(players) == 2
        sb_idx, bb_idx = (0, 1) if heads_up else (1, 2)
        sb_player = players[sb_idx]
        bb_player = players[bb_idx]

        sb_bet = sb_player.place_bet(table.small_blind)
        bb_bet = bb_player.place_bet(table.big_blind)
        table.pot += sb_bet + bb_bet
        sb_player.small_blind = True
        bb_player.big_blind = True

        table.current_bet = table.big_blind
        table.last_raise = table.big_blind

        events.append({"ev": "BLIND", "kind": "small", "seat": sb_player.seat_index, "name": sb_player.name, "amount": sb_bet})
        events.append({"ev": "BLIND", "kind": "big", "seat": bb_player.seat_index, "name": bb_player.name, "amount": bb_bet})
        return events

    # Bust-outs -------------------------------------------------------

    def remove_busted(self) -> List[Event]:
        table = self.table
        events: List[Event] = []
        remaining: List[Player] = []
        for player in table.players:
            if player.chips <= 0:
                player.chips = 0
                player.dealer = player.small_blind = player.big_blind = False
                table.busted.append(player)
                events.append({"ev": "BUSTED", "seat": player.seat_index, "name": player.name})
            else:
                remaining.append(player)
        table.players = remaining

        if remaining and not any(p.seat_index == table.initial_dealer_seat for p in remaining):
            table.initial_dealer_seat = remaining[0].seat_index
            table.dealer_orbit_count = -1

        if len(remaining) == 1:
            champion = remaining[0]
            events.append({"ev": "SESSION_WINNER", "seat": champion.seat_index, "name": champion.name, "chips": champion.chips})
        return events

    def is_session_over(self) -> bool:
        return len(self.table.players) <= 1
