"""
Shared fixtures for the Landlord engine tests.
"""

import pytest

from landlord_engine.constants import Phase
from landlord_engine.engine import Room
from landlord_engine.rules import create_rules

NAMES = ["Alice", "Bob", "Charlie"]


@pytest.fixture
def rules():
    return create_rules(seed=42)


@pytest.fixture
def room(rules):
    """A room with nobody seated."""
    return Room("test-room", rules)


@pytest.fixture
def bidding_room(room):
    """Three players joined, cards dealt, bidding open."""
    for name in NAMES:
        result = room.join(name)
        assert result.success
    assert room.state.phase == Phase.BIDDING
    return room


@pytest.fixture
def make_playing_room(bidding_room):
    """Factory that puts the room straight into play with chosen hands."""
    def factory(hands, landlord=0, current=None, multiplier=1):
        state = bidding_room.state
        for seat, player_id in enumerate(state.player_order):
            state.players[player_id].hand = list(hands[seat])
        state.bidding = None
        state.bottom_cards = []
        state.discard = []
        state.table.clear()
        state.consecutive_passes = 0
        state.landlord_id = state.player_order[landlord]
        state.multiplier = multiplier
        state.current_player_index = landlord if current is None else current
        state.phase = Phase.PLAYING
        return bidding_room
    return factory


def player_id(room, name):
    return room.state.player_by_name(name).id


def events(result):
    return [notice.event for notice in result.notices]
