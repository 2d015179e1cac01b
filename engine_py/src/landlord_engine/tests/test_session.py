"""
Tests for disconnects, pausing, rejoining and reset.
"""

import asyncio

from landlord_engine.constants import GAME_LOG_LIMIT, NoticeType, Phase
from landlord_engine.errors import ROOM_FULL, WRONG_PHASE
from landlord_engine.session import DeadlineRegistry, PauseDeadline, SessionRegistry

from conftest import NAMES, events, player_id

HANDS = [
    ["3♠", "4♠", "9♥", "J♣", "J♦"],
    ["6♥", "8♦", "K♣"],
    ["7♦", "10♠", "A♣"],
]


def notices_of(result, event):
    return [n for n in result.notices if n.event == event.value]


def test_disconnect_during_play_pauses(make_playing_room):
    room = make_playing_room(HANDS)
    bob = player_id(room, "Bob")

    result = room.disconnect(bob)

    state = room.state
    assert result.success
    assert state.phase == Phase.PLAYING
    assert state.paused
    assert state.vacated == [bob]
    assert not state.players[bob].connected
    # Hand stays with the vacated seat
    assert state.players[bob].hand == HANDS[1]

    paused = notices_of(result, NoticeType.GAME_PAUSED)[0]
    assert paused.exclude == bob
    assert paused.data["player"] == "Bob"
    assert paused.data["timeout"] == room.rules.pause_timeout


def test_disconnect_during_bidding_pauses(bidding_room):
    alice = player_id(bidding_room, "Alice")
    bidding_room.disconnect(alice)
    assert bidding_room.state.paused
    assert bidding_room.state.phase == Phase.BIDDING


def test_actions_ignored_while_paused(make_playing_room):
    room = make_playing_room(HANDS)
    alice = player_id(room, "Alice")
    room.disconnect(player_id(room, "Bob"))

    result = room.play_cards(alice, ["3♠"])

    assert not result.success
    assert result.silent
    assert result.error_code == WRONG_PHASE
    assert room.state.players[alice].hand == HANDS[0]
    assert room.request_hints(alice).error_code == WRONG_PHASE


def test_stranger_cannot_take_vacated_seat(make_playing_room):
    room = make_playing_room(HANDS)
    room.disconnect(player_id(room, "Bob"))

    result = room.join("Dana")

    assert result.error_code == ROOM_FULL
    assert "Dana" not in [p.name for p in room.state.players.values()]


def test_rejoin_restores_seat(make_playing_room):
    room = make_playing_room(HANDS)
    alice, bob = player_id(room, "Alice"), player_id(room, "Bob")
    room.play_cards(alice, ["9♥"])
    room.disconnect(bob)

    result = room.join("Bob")

    state = room.state
    assert result.success
    assert result.player_id == bob
    assert not state.paused
    assert state.players[bob].connected

    snapshot = notices_of(result, NoticeType.STATE_FULL)[0]
    assert snapshot.to == bob
    assert snapshot.data["hand"] == HANDS[1]
    assert snapshot.data["table"]["cards"] == ["9♥"]
    assert snapshot.data["table"]["player"] == "Alice"
    assert snapshot.data["current_player"] == "Bob"
    assert snapshot.data["landlord"] == "Alice"
    assert snapshot.data["paused"] is False
    assert snapshot.data["log"] == list(state.game_log)
    assert "Bob rejoined" in snapshot.data["log"]

    resumed = notices_of(result, NoticeType.GAME_RESUMED)[0]
    assert resumed.exclude == bob

    # Play continues where it stopped
    assert room.play_cards(bob, ["K♣"]).success


def test_room_stays_paused_until_all_return(make_playing_room):
    room = make_playing_room(HANDS)
    bob, charlie = player_id(room, "Bob"), player_id(room, "Charlie")
    room.disconnect(bob)
    room.disconnect(charlie)

    first = room.join("Bob")
    assert room.state.paused
    assert NoticeType.GAME_RESUMED.value not in events(first)

    second = room.join("Charlie")
    assert not room.state.paused
    assert NoticeType.GAME_RESUMED.value in events(second)


def test_lobby_disconnect_frees_seat(room):
    alice = room.join("Alice").player_id
    room.join("Bob")

    result = room.disconnect(alice)

    assert result.success
    assert list(p.name for p in room.state.players.values()) == ["Bob"]
    assert room.state.players[player_id(room, "Bob")].seat == 0
    assert not room.state.paused


def test_round_over_disconnect_returns_to_lobby(make_playing_room):
    room = make_playing_room([["3♠"], ["4♦"], ["5♣"]])
    room.play_cards(player_id(room, "Alice"), ["3♠"])
    assert room.state.phase == Phase.ROUND_OVER

    room.disconnect(player_id(room, "Charlie"))

    assert room.state.phase == Phase.LOBBY
    assert len(room.state.players) == 2
    assert room.request_next_round().error_code == WRONG_PHASE

    # A newcomer fills the seat and a round starts
    room.join("Dana")
    assert room.state.phase == Phase.BIDDING


def test_reset_only_while_paused(make_playing_room):
    room = make_playing_room(HANDS)
    assert room.reset_game().error_code == WRONG_PHASE
    assert room.state.phase == Phase.PLAYING


def test_reset_drops_vacated_seats(make_playing_room):
    room = make_playing_room(HANDS)
    alice, bob = player_id(room, "Alice"), player_id(room, "Bob")
    room.state.players[alice].points = 6
    room.disconnect(bob)

    result = room.reset_game(alice)

    state = room.state
    assert result.success
    assert state.phase == Phase.LOBBY
    assert not state.paused
    assert bob not in state.players
    assert [p.name for p in state.seated()] == ["Alice", "Charlie"]
    assert all(p.points == 0 for p in state.players.values())
    assert all(not p.hand for p in state.players.values())
    assert state.landlord_id is None
    assert notices_of(result, NoticeType.GAME_RESET)[0].data == {"dropped": ["Bob"]}

    # The freed seat can be taken by someone new
    assert room.join("Dana").success
    assert state.phase == Phase.BIDDING


def test_session_registry_binding():
    sessions = SessionRegistry()
    assert sessions.bind("c1", "room", "p1") is None
    sessions.bind("c2", "room", "p2")
    sessions.bind("c3", "other", "p1")

    assert sessions.lookup("c1").player_id == "p1"
    assert sessions.connection_for("room", "p1") == "c1"
    assert {b.connection_id for b in sessions.bindings_in("room")} == {"c1", "c2"}

    # A new connection for the same seat displaces the old one
    assert sessions.bind("c4", "room", "p1") == "c1"
    assert sessions.lookup("c1") is None
    assert sessions.connection_for("room", "p1") == "c4"

    assert sessions.unbind("c4").player_id == "p1"
    assert sessions.connection_for("room", "p1") is None
    assert sessions.unbind("missing") is None


def test_pause_deadline_expires():
    fired = []

    async def on_expire():
        fired.append(True)

    async def scenario():
        deadline = PauseDeadline(0.01, on_expire)
        deadline.start()
        assert deadline.active
        await asyncio.sleep(0.05)
        assert not deadline.active

    asyncio.run(scenario())
    assert fired == [True]


def test_pause_deadline_cancel():
    fired = []

    async def on_expire():
        fired.append(True)

    async def scenario():
        registry = DeadlineRegistry()
        registry.arm("room", 0.02, on_expire)
        assert registry.is_armed("room")
        # Arming again keeps the running countdown
        registry.arm("room", 5, on_expire)
        assert registry.cancel("room")
        assert not registry.is_armed("room")
        assert not registry.cancel("room")
        await asyncio.sleep(0.05)

    asyncio.run(scenario())
    assert fired == []


def test_every_name_rejoins_its_own_seat(bidding_room):
    ids = {name: player_id(bidding_room, name) for name in NAMES}
    for name in NAMES:
        bidding_room.disconnect(ids[name])
    for name in reversed(NAMES):
        assert bidding_room.join(name).player_id == ids[name]
    assert not bidding_room.state.paused


def test_game_log_is_bounded(room):
    room.join("Alice")
    for _ in range(GAME_LOG_LIMIT):
        room.disconnect(room.join("Bob").player_id)

    log = room.state.game_log
    assert len(log) == GAME_LOG_LIMIT
    assert log[-1] == "Bob left The Pitstop"


def test_reset_clears_log_and_last_winner(make_playing_room):
    room = make_playing_room(HANDS)
    room.state.last_winner = player_id(room, "Alice")
    room.disconnect(player_id(room, "Bob"))
    assert room.state.game_log

    room.reset_game()

    assert len(room.state.game_log) == 0
    assert room.state.last_winner is None
