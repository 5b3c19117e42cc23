import pytest

from holdem.betting import BettingRound
from holdem.models import ActionType, Phase, SeatState

from .helpers import create_lifecycle, events_of, perform_actions, seat


def test_heads_up_blinds_and_first_actor():
    lifecycle = create_lifecycle([2000, 2000])
    events = lifecycle.start_hand()
    table = lifecycle.table

    assert table.pot == 30
    assert table.current_bet == 20
    assert table.last_raise == 20
    dealer = table.players[0]
    assert dealer.dealer and dealer.small_blind
    assert table.players[1].big_blind
    # Heads-up the dealer posts the small blind and acts first preflop.
    assert lifecycle.pending_actor is dealer
    blinds = events_of(events, "BLIND")
    assert [(b["kind"], b["amount"]) for b in blinds] == [("small", 10), ("big", 20)]


def test_three_handed_utg_acts_first_and_big_blind_gets_option():
    lifecycle = create_lifecycle([1000, 1000, 1000])
    lifecycle.start_hand()
    table = lifecycle.table
    dealer, sb, bb = table.players

    assert lifecycle.pending_actor is dealer
    perform_actions(lifecycle, [(dealer.seat_index, ActionType.CALL, None), (sb.seat_index, ActionType.CALL, None)])
    assert lifecycle.pending_actor is bb
    context = lifecycle.action_context()
    assert context == {"needToCall": 0, "minRaise": 20, "canCheck": True, "canRaise": True, "playerChips": 980}

    lifecycle.apply_action(bb.seat_index, ActionType.CHECK)
    assert table.phase == Phase.FLOP
    assert len(table.community) == 3
    # Post-flop the first seat after the dealer opens.
    assert lifecycle.pending_actor is sb


def test_raise_below_minimum_is_corrected_up():
    lifecycle = create_lifecycle([1000, 1000, 1000])
    lifecycle.start_hand()
    table = lifecycle.table
    dealer, sb, _ = table.players

    lifecycle.apply_action(dealer.seat_index, ActionType.CALL)
    assert lifecycle.action_context()["needToCall"] == 10
    events = lifecycle.apply_action(sb.seat_index, ActionType.RAISE, 15)

    action = events_of(events, "ACTION")[0]
    assert action["action"] == "raise"
    assert action["amount"] == 30
    assert sb.round_bet == 40
    assert table.current_bet == 40
    assert table.last_raise == 20
    assert table.raises_this_round == 1


def test_raise_at_or_above_stack_becomes_all_in():
    lifecycle = create_lifecycle([300, 1000, 1000])
    lifecycle.start_hand()
    dealer = lifecycle.table.players[0]
    events = lifecycle.apply_action(dealer.seat_index, ActionType.RAISE, 5000)
    action = events_of(events, "ACTION")[0]
    assert action["action"] == "allin"
    assert action["amount"] == 300
    assert dealer.all_in and dealer.chips == 0


def test_short_all_in_does_not_reopen_betting():
    lifecycle = create_lifecycle([1000, 1000, 130])
    lifecycle.start_hand()
    table = lifecycle.table
    dealer, sb, bb = table.players

    perform_actions(
        lifecycle,
        [
            (dealer.seat_index, ActionType.RAISE, 100),
            (sb.seat_index, ActionType.CALL, None),
            (bb.seat_index, ActionType.ALLIN, None),
        ],
    )
    assert bb.all_in
    assert table.current_bet == 130
    assert table.last_raise == 80
    assert table.raises_this_round == 1

    assert lifecycle.pending_actor is dealer
    assert lifecycle.action_context()["canRaise"] is False
    events = lifecycle.apply_action(dealer.seat_index, ActionType.RAISE, 500)
    assert events_of(events, "ACTION")[0]["action"] == "call"
    assert dealer.round_bet == 130


def test_full_raise_reopens_action_for_everyone():
    lifecycle = create_lifecycle([1000, 1000, 1000])
    lifecycle.start_hand()
    dealer, sb, bb = lifecycle.table.players
    perform_actions(
        lifecycle,
        [
            (dealer.seat_index, ActionType.CALL, None),
            (sb.seat_index, ActionType.CALL, None),
            (bb.seat_index, ActionType.RAISE, 60),
        ],
    )
    assert lifecycle.pending_actor is dealer
    assert lifecycle.action_context()["canRaise"] is True
    assert lifecycle.round.seat_state(bb) == SeatState.MATCHED
    assert lifecycle.round.seat_state(dealer) == SeatState.TO_ACT


def test_check_facing_a_bet_is_played_as_a_call():
    lifecycle = create_lifecycle([1000, 1000])
    lifecycle.start_hand()
    dealer, big_blind = lifecycle.table.players
    events = lifecycle.apply_action(dealer.seat_index, ActionType.CHECK)
    assert events[0]["action"] == "call"
    assert events[0]["amount"] == 10
    assert dealer.round_bet == 20
    # The big blind still has the option.
    assert lifecycle.pending_actor is big_blind


def test_out_of_turn_and_unknown_actions_are_rejected():
    lifecycle = create_lifecycle([1000, 1000, 1000])
    with pytest.raises(RuntimeError, match="Hand not active"):
        lifecycle.apply_action(0, ActionType.CALL)
    lifecycle.start_hand()
    bb = lifecycle.table.players[2]
    with pytest.raises(RuntimeError, match="Not your turn"):
        lifecycle.apply_action(bb.seat_index, ActionType.CALL)
    actor = lifecycle.pending_actor
    with pytest.raises(ValueError, match="Unsupported action"):
        lifecycle.apply_action(actor.seat_index, "bluff")


def test_garbage_raise_amount_is_treated_as_minimum():
    lifecycle = create_lifecycle([1000, 1000])
    lifecycle.start_hand()
    dealer = lifecycle.table.players[0]
    lifecycle.apply_action(dealer.seat_index, ActionType.RAISE, "lots")
    # need 10 + last raise 20
    assert dealer.round_bet == 40


def test_betting_round_is_skipped_when_fewer_than_two_can_act():
    lifecycle = create_lifecycle([500, 1000])
    lifecycle.start_hand()
    dealer, bb = lifecycle.table.players
    lifecycle.apply_action(dealer.seat_index, ActionType.ALLIN)
    lifecycle.apply_action(bb.seat_index, ActionType.CALL)

    # Nobody left to bet: the board runs out and the hand is settled.
    assert not lifecycle.hand_in_progress
    assert len(lifecycle.table.community) == 5
    assert lifecycle.table.pot == 0
    assert dealer.chips + bb.chips == 1500


def test_preflop_stats_are_counted():
    lifecycle = create_lifecycle([1000, 1000, 1000])
    lifecycle.start_hand()
    dealer, sb, bb = lifecycle.table.players
    perform_actions(
        lifecycle,
        [
            (dealer.seat_index, ActionType.RAISE, 60),
            (sb.seat_index, ActionType.FOLD, None),
            (bb.seat_index, ActionType.CALL, None),
        ],
    )
    assert dealer.stats.vpip == 1 and dealer.stats.pfr == 1
    assert sb.stats.folds == 1 and sb.stats.folds_preflop == 1
    assert bb.stats.vpip == 1 and bb.stats.pfr == 0


def test_every_raise_lifts_the_bet_by_at_least_the_last_raise():
    lifecycle = create_lifecycle([400, 900, 250, 1200], seed=3)
    lifecycle.start_hand()
    table = lifecycle.table
    script = [ActionType.RAISE, ActionType.ALLIN, ActionType.CALL, ActionType.RAISE, ActionType.CALL]
    raises = 0
    step = 0
    while lifecycle.hand_in_progress and step < 40:
        actor = lifecycle.pending_actor
        level, last_raise = table.current_bet, table.last_raise
        action = script[step % len(script)]
        event = lifecycle.apply_action(actor.seat_index, action, 50)[0]
        step += 1
        assert event["round_bet"] >= level or event["all_in"]
        if event["action"] == "raise":
            raises += 1
            assert not event["all_in"]
            assert event["round_bet"] - level >= last_raise
    assert raises > 0


def test_round_start_resets_post_flop_state():
    lifecycle = create_lifecycle([1000, 1000])
    lifecycle.start_hand()
    table = lifecycle.table
    table.phase = Phase.FLOP
    table.current_bet = 80
    table.last_raise = 60
    round_ = BettingRound(table)
    round_.start()
    assert table.current_bet == 0
    assert table.last_raise == table.big_blind
    assert all(p.round_bet == 0 for p in table.players)
    assert seat(table, table.players[1].seat_index) is round_.next_actor()
