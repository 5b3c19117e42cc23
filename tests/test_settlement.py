import random

from holdem.evaluator import rank_showdown
from holdem.settlement import build_side_pots, merge_side_pots, settle

from .helpers import create_table, events_of


def committed_table(bets, *, folded=(), hole=None, board=None):
    """Table at showdown: every stack fully committed as ``bets``."""
    table = create_table([0] * len(bets))
    for player, bet in zip(table.players, bets):
        player.total_bet = bet
        player.round_bet = bet
        player.all_in = True
        player.folded = player.seat_index in folded
    if hole:
        for player, cards in zip(table.players, hole):
            player.hole_cards = list(cards)
    table.community = list(board or [])
    table.pot = sum(bets)
    return table


def test_three_way_all_in_builds_three_pots():
    table = committed_table([100, 50, 30])
    pots = build_side_pots(table.players)

    assert [pot.amount for pot in pots] == [90, 40, 50]
    assert [sorted(p.seat_index for p in pot.eligible) for pot in pots] == [[0, 1, 2], [0, 1], [0]]


def test_three_way_all_in_pays_each_pot_to_its_best_contender():
    board = ["2C", "7D", "9H", "JS", "4C"]
    table = committed_table(
        [100, 50, 30],
        hole=[["3C", "3D"], ["KC", "KD"], ["AC", "AD"]],
        board=board,
    )
    events = settle(table, rank_showdown)
    chips = {p.seat_index: p.chips for p in table.players}

    # Shortest stack wins the main pot, the middle stack the side pot, the rest comes back.
    assert chips == {0: 50, 1: 40, 2: 90}
    assert table.pot == 0
    wins = events_of(events, "WIN")
    assert [(w["players"], w["amount"]) for w in wins] == [(["Player2"], 90), (["Player1"], 40)]
    assert all(w["hand"] == "Pair" for w in wins)
    shown = events_of(events, "SHOWDOWN")[0]
    assert shown["board"] == board
    assert [p.stats.showdowns for p in table.players] == [1, 1, 1]
    # The returned excess counts as a won hand too.
    assert [p.stats.showdowns_won for p in table.players] == [1, 1, 1]


def test_merge_combines_adjacent_pots_with_same_contenders():
    table = committed_table([100, 50, 100], folded={1})
    pots = build_side_pots(table.players)
    assert [pot.amount for pot in pots] == [150, 100]

    merged = merge_side_pots(pots)
    assert [pot.amount for pot in merged] == [250]
    assert sorted(p.seat_index for p in merged[0].contenders()) == [0, 2]
    # Inputs are left alone and a second pass changes nothing.
    assert [pot.amount for pot in pots] == [150, 100]
    again = merge_side_pots(merged)
    assert [pot.amount for pot in again] == [250]


def test_merge_keeps_pots_with_different_contenders():
    table = committed_table([30, 60, 90])
    merged = merge_side_pots(build_side_pots(table.players))
    assert [pot.amount for pot in merged] == [90, 60, 30]


def test_side_pots_account_for_every_chip():
    rng = random.Random(99)
    for _ in range(200):
        count = rng.randint(2, 6)
        bets = [rng.choice([0, 10, 20, 35, 50, 50, 120, 400]) for _ in range(count)]
        folded = {idx for idx in range(count) if rng.random() < 0.3}
        table = committed_table(bets, folded=folded)
        pots = build_side_pots(table.players)
        assert sum(pot.amount for pot in pots) == sum(bets)
        assert sum(pot.amount for pot in merge_side_pots(pots)) == sum(bets)
        levels = [min(p.total_bet for p in pot.eligible) for pot in pots]
        assert levels == sorted(set(levels))


def test_split_pot_remainder_goes_to_first_winner():
    board = ["AS", "KD", "QH", "JC", "TS"]
    table = committed_table(
        [50, 50, 1],
        folded={2},
        hole=[["2C", "3D"], ["4C", "5D"], ["6C", "7D"]],
        board=board,
    )
    events = settle(table, rank_showdown)

    assert [p.chips for p in table.players] == [51, 50, 0]
    wins = events_of(events, "WIN")
    assert wins == [{"ev": "WIN", "players": ["Player0", "Player1"], "amount": 101, "hand": None}]


def test_uncontested_pot_goes_to_last_player_standing():
    table = committed_table([20, 60, 10], folded={0, 2})
    events = settle(table, rank_showdown)

    assert table.players[1].chips == 90
    assert table.players[1].stats.hands_won == 1
    assert not events_of(events, "SHOWDOWN")
    assert events_of(events, "WIN") == [{"ev": "WIN", "players": ["Player1"], "amount": 90, "hand": None}]


def test_single_winner_of_several_pots_is_reported_once():
    board = ["2C", "7D", "9H", "JS", "4C"]
    table = committed_table(
        [100, 60, 30],
        hole=[["AC", "AD"], ["KC", "KD"], ["3C", "3D"]],
        board=board,
    )
    events = settle(table, rank_showdown)
    assert table.players[0].chips == 190
    assert events_of(events, "WIN") == [{"ev": "WIN", "players": ["Player0"], "amount": 150, "hand": "Pair"}]
