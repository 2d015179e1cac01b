"""
Tests for bidding on the bottom cards.
"""

from landlord_engine.bidding import (
    OUTCOME_LANDLORD, OUTCOME_NEXT, OUTCOME_REVEALED, apply_decision, can_decide,
    start_bidding,
)
from landlord_engine.constants import NoticeType, Phase
from landlord_engine.errors import OUT_OF_TURN, WRONG_PHASE

from conftest import events


def offered_to(room):
    state = room.state
    return state.player_order[state.bidding.pick_index]


def test_take_before_reveal_doubles():
    bidding = start_bidding(1)
    outcome = apply_decision(bidding, take=True)
    assert outcome.kind == OUTCOME_LANDLORD
    assert outcome.seat == 1
    assert outcome.doubled
    assert not outcome.forced
    assert bidding.resolved


def test_three_passes_reveal_and_restart_at_origin():
    bidding = start_bidding(2)
    assert apply_decision(bidding, take=False).kind == OUTCOME_NEXT
    assert bidding.pick_index == 0
    assert apply_decision(bidding, take=False).kind == OUTCOME_NEXT
    assert bidding.pick_index == 1

    outcome = apply_decision(bidding, take=False)
    assert outcome.kind == OUTCOME_REVEALED
    assert bidding.revealed
    assert bidding.attempts == 0
    assert bidding.pick_index == 2


def test_take_after_reveal_does_not_double():
    bidding = start_bidding(0)
    for _ in range(3):
        apply_decision(bidding, take=False)
    apply_decision(bidding, take=False)  # origin passes again
    outcome = apply_decision(bidding, take=True)
    assert outcome.kind == OUTCOME_LANDLORD
    assert outcome.seat == 1
    assert not outcome.doubled


def test_two_passes_after_reveal_force_next_seat():
    bidding = start_bidding(0)
    for _ in range(3):
        apply_decision(bidding, take=False)
    assert apply_decision(bidding, take=False).kind == OUTCOME_NEXT
    outcome = apply_decision(bidding, take=False)

    # Seat 1 passed last, so seat 2 is forced
    assert outcome.kind == OUTCOME_LANDLORD
    assert outcome.seat == 2
    assert outcome.forced
    assert not outcome.doubled


def test_only_offered_seat_may_decide():
    bidding = start_bidding(1)
    assert can_decide(bidding, 1)
    assert not can_decide(bidding, 0)
    apply_decision(bidding, take=True)
    assert not can_decide(bidding, 1)
    assert not can_decide(None, 1)


def test_room_take_awards_bottom_cards(bidding_room):
    state = bidding_room.state
    bottom = list(state.bottom_cards)
    taker = offered_to(bidding_room)

    result = bidding_room.pickup_decision(taker, take=True)

    assert result.success
    assert state.phase == Phase.PLAYING
    assert state.landlord_id == taker
    assert state.current_player_id == taker
    assert state.multiplier == 2
    assert len(state.players[taker].hand) == 20
    assert set(bottom) <= set(state.players[taker].hand)
    assert state.bottom_cards == []
    assert state.awarded_bottom == bottom

    starts = [n for n in result.notices if n.event == NoticeType.START_GAME.value]
    assert len(starts) == 3
    for notice in starts:
        assert notice.data["your_turn"] == (notice.to == taker)
        assert notice.data["hand"] == state.players[notice.to].hand
    assert NoticeType.WAGER.value in events(result)


def test_room_pass_moves_offer_to_next_seat(bidding_room):
    state = bidding_room.state
    first = offered_to(bidding_room)
    result = bidding_room.pickup_decision(first, take=False)

    assert result.success
    assert state.phase == Phase.BIDDING
    following = offered_to(bidding_room)
    assert following != first
    assert state.current_player_id == following
    prompt = [n for n in result.notices if n.event == NoticeType.BID_PROMPT.value][0]
    assert prompt.data["player"] == state.players[following].name


def test_room_reveal_then_forced(bidding_room):
    state = bidding_room.state
    origin = offered_to(bidding_room)

    for _ in range(2):
        bidding_room.pickup_decision(offered_to(bidding_room), take=False)
    result = bidding_room.pickup_decision(offered_to(bidding_room), take=False)

    assert state.bidding.revealed
    assert offered_to(bidding_room) == origin
    revealed = [n for n in result.notices if n.event == NoticeType.HANDS_REVEALED.value]
    assert len(revealed) == 1
    assert revealed[0].to is None
    assert set(revealed[0].data["hands"]) == {p.name for p in state.players.values()}

    bidding_room.pickup_decision(offered_to(bidding_room), take=False)
    second = offered_to(bidding_room)
    bidding_room.pickup_decision(second, take=False)

    forced = state.player_order[(state.player_order.index(second) + 1) % 3]
    assert state.phase == Phase.PLAYING
    assert state.landlord_id == forced
    assert state.multiplier == 1


def test_room_ignores_out_of_turn_decision(bidding_room):
    state = bidding_room.state
    other = next(pid for pid in state.player_order if pid != offered_to(bidding_room))
    version = state.version

    result = bidding_room.pickup_decision(other, take=True)

    assert not result.success
    assert result.silent
    assert result.error_code == OUT_OF_TURN
    assert state.landlord_id is None
    assert state.version == version


def test_decision_after_landlord_is_ignored(bidding_room):
    taker = offered_to(bidding_room)
    bidding_room.pickup_decision(taker, take=True)

    result = bidding_room.pickup_decision(taker, take=True)
    assert not result.success
    assert result.error_code == WRONG_PHASE
    assert bidding_room.state.multiplier == 2
