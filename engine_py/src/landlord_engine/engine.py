"""Main game engine: the room aggregate and the room registry"""

import logging
import random
import threading
import uuid
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .bidding import (
    OUTCOME_LANDLORD, OUTCOME_REVEALED, BidOutcome, apply_decision, can_decide,
    start_bidding,
)
from .comparator import get_valid_plays
from .constants import (
    DOUBLING_COMBOS, PAUSED_ACTIONS, PHASE_ACTIONS, Action, NoticeType, Phase,
    sort_cards,
)
from .errors import (
    NAME_TAKEN, OUT_OF_TURN, ROOM_FULL, ROOM_NOT_FOUND, SILENT_CODES, WRONG_PHASE,
)
from .models import Notice, Player, RoomState, TableState
from .rules import RuleConfig, default_rules
from .scoring import apply_round_scores, double_wager, wager_snapshot
from .serialization import (
    deal_preview, revealed_hands, roster_snapshot, sanitize_state,
)
from .shuffle import new_round_deal
from .validate import validate_pass, validate_play

logger = logging.getLogger(__name__)


@dataclass
class ActionResult:
    """Outcome of one inbound action applied to a room.

    ``reply`` goes to the acting connection whether or not it is bound to
    a seat yet; ``notices`` are addressed by player id.
    """
    success: bool
    message: str = ""
    error_code: Optional[str] = None
    notices: List[Notice] = field(default_factory=list)
    reply: Optional[Notice] = None
    player_id: Optional[str] = None

    @property
    def silent(self) -> bool:
        return self.error_code in SILENT_CODES

    @classmethod
    def ok(cls, message: str = "", **kwargs) -> 'ActionResult':
        return cls(success=True, message=message, **kwargs)

    @classmethod
    def rejected(cls, code: str, message: str) -> 'ActionResult':
        return cls(success=False, message=message, error_code=code)


class Room:
    """All state of one room plus every operation that mutates it.

    Each public method applies one inbound action to completion and
    returns the notices it produced; nothing here awaits or blocks.
    """

    def __init__(self, room_id: str, rules: RuleConfig = default_rules,
                 rng: Optional[random.Random] = None):
        self.rules = rules
        self.state = RoomState(id=room_id, name=rules.room_name)
        self.rng = rng or random.Random(rules.seed)
        self._outbox: List[Notice] = []

    # ------------------------------------------------------------------
    # plumbing

    def allows(self, action: Action) -> bool:
        if self.state.paused:
            return action in PAUSED_ACTIONS
        return action in PHASE_ACTIONS[self.state.phase]

    def _guard(self, action: Action) -> Optional[ActionResult]:
        if self.allows(action):
            return None
        status = f"{self.state.phase.value}{' (paused)' if self.state.paused else ''}"
        logger.debug(f"Room {self.state.id}: ignoring {action.value} while {status}")
        return ActionResult.rejected(WRONG_PHASE, f"{action.value} is not allowed while {status}")

    def _ignored(self, code: str, message: str) -> ActionResult:
        logger.debug(f"Room {self.state.id}: {message}")
        return ActionResult.rejected(code, message)

    def _broadcast(self, event: NoticeType, data: Optional[dict] = None,
                   exclude: Optional[str] = None):
        self._outbox.append(Notice(event.value, data or {}, exclude=exclude))

    def _send(self, player_id: str, event: NoticeType, data: Optional[dict] = None):
        self._outbox.append(Notice(event.value, data or {}, to=player_id))

    def _done(self, message: str = "", **kwargs) -> ActionResult:
        notices, self._outbox = self._outbox, []
        self.state.increment_version()
        return ActionResult.ok(message, notices=notices, **kwargs)

    def _log(self, text: str, announce: bool = True):
        self.state.game_log.append(text)
        logger.info(f"Room {self.state.id}: {text}")
        if announce:
            self._broadcast(NoticeType.GAME_MESSAGE, {"text": text})

    def _name(self, player_id: Optional[str]) -> Optional[str]:
        player = self.state.players.get(player_id) if player_id else None
        return player.name if player else None

    def _announce_roster(self):
        self._broadcast(NoticeType.PLAYER_LIST, roster_snapshot(self.state))

    def _announce_wager(self):
        self._broadcast(NoticeType.WAGER, wager_snapshot(self.state, self.rules))

    def _reseat(self):
        for seat, player in enumerate(self.state.seated()):
            player.seat = seat

    def _clear_round(self):
        state = self.state
        for player in state.players.values():
            player.hand = []
        state.table.clear()
        state.consecutive_passes = 0
        state.bottom_cards = []
        state.awarded_bottom = []
        state.discard = []
        state.multiplier = 1
        state.landlord_id = None
        state.bidding = None
        state.reveal_card = None
        state.reveal_owner = None
        state.current_player_index = 0

    # ------------------------------------------------------------------
    # lobby and round lifecycle

    def join(self, name: str) -> ActionResult:
        rejected = self._guard(Action.JOIN)
        if rejected:
            return rejected

        state = self.state
        name = name.strip()

        if state.paused:
            player = state.player_by_name(name)
            if player and player.id in state.vacated:
                return self._rejoin(player)
            return ActionResult.rejected(ROOM_FULL, f"{state.name} is full")

        if state.round_active or len(state.players) >= self.rules.max_players:
            return ActionResult.rejected(ROOM_FULL, f"{state.name} is full")

        if state.player_by_name(name):
            return ActionResult.rejected(NAME_TAKEN, f"The name {name} is already taken")

        player_id = str(uuid.uuid4())[:8]
        state.players[player_id] = Player(id=player_id, name=name, seat=len(state.players))
        if state.phase == Phase.ROUND_OVER:
            state.phase = Phase.LOBBY
        self._log(f"{name} joined {state.name}", announce=False)
        self._announce_roster()

        if len(state.players) == self.rules.max_players:
            self._start_round()

        return self._done("Joined", player_id=player_id)

    def _start_round(self):
        state = self.state
        state.phase = Phase.DEALING
        self._clear_round()
        state.round_number += 1
        state.player_order = [p.id for p in state.seated()]

        deal = new_round_deal(
            seat_count=len(state.player_order),
            hand_size=self.rules.hand_size,
            bottom_size=self.rules.bottom_size,
            rng=self.rng,
        )
        for seat, player_id in enumerate(state.player_order):
            state.players[player_id].hand = deal.hands[seat]
        state.bottom_cards = deal.bottom
        state.reveal_card = deal.reveal_card
        state.reveal_owner = state.player_order[deal.reveal_seat]

        state.bidding = start_bidding(deal.reveal_seat)
        state.current_player_index = deal.reveal_seat
        state.phase = Phase.BIDDING

        logger.info(f"Room {state.id}: round {state.round_number} dealt")
        for player_id in state.player_order:
            self._send(player_id, NoticeType.DEAL_PREVIEW, deal_preview(state, player_id))
        self._announce_roster()
        self._announce_wager()
        self._log(
            f"{self._name(state.reveal_owner)} holds the face-up {state.reveal_card} "
            f"and is offered the bottom cards first"
        )
        self._prompt_bid()

    def request_next_round(self, player_id: Optional[str] = None) -> ActionResult:
        rejected = self._guard(Action.NEXT_ROUND)
        if rejected:
            return rejected
        if len(self.state.players) < self.rules.max_players:
            return self._ignored(WRONG_PHASE, "Not enough players for another round")
        self._start_round()
        return self._done("Next round started")

    def request_player_list(self, player_id: Optional[str] = None) -> ActionResult:
        rejected = self._guard(Action.PLAYER_LIST)
        if rejected:
            return rejected
        reply = Notice(NoticeType.PLAYER_LIST.value, roster_snapshot(self.state))
        return ActionResult.ok("Player list", reply=reply)

    # ------------------------------------------------------------------
    # bidding

    def _prompt_bid(self):
        bidding = self.state.bidding
        self.state.current_player_index = bidding.pick_index
        self._broadcast(NoticeType.BID_PROMPT, {
            "player": self._name(self.state.player_order[bidding.pick_index]),
            "attempts": bidding.attempts,
            "revealed": bidding.revealed,
        })

    def pickup_decision(self, player_id: str, take: bool) -> ActionResult:
        rejected = self._guard(Action.PICKUP)
        if rejected:
            return rejected

        state = self.state
        if player_id not in state.player_order:
            return self._ignored(OUT_OF_TURN, f"{player_id} is not seated")
        seat = state.player_order.index(player_id)
        if not can_decide(state.bidding, seat):
            return self._ignored(OUT_OF_TURN, f"{self._name(player_id)} may not decide now")

        name = self._name(player_id)
        outcome = apply_decision(state.bidding, take, len(state.player_order), self.rules)

        if outcome.kind == OUTCOME_LANDLORD:
            self._assign_landlord(outcome)
        elif outcome.kind == OUTCOME_REVEALED:
            self._log(f"{name} passed. Nobody took the bottom cards, so every hand is revealed")
            self._broadcast(NoticeType.HANDS_REVEALED, revealed_hands(state))
            self._prompt_bid()
        else:
            self._log(f"{name} passed")
            self._prompt_bid()

        return self._done("Decision recorded")

    def _assign_landlord(self, outcome: BidOutcome):
        state = self.state
        landlord_id = state.player_order[outcome.seat]
        landlord = state.players[landlord_id]

        landlord.hand = sort_cards(landlord.hand + state.bottom_cards)
        state.awarded_bottom = state.bottom_cards
        state.bottom_cards = []
        state.landlord_id = landlord_id
        if outcome.doubled:
            double_wager(state)

        state.phase = Phase.PLAYING
        state.current_player_index = outcome.seat
        state.table.clear()
        state.consecutive_passes = 0

        if outcome.forced:
            self._log(f"{landlord.name} is forced to take the bottom cards and becomes the landlord")
        else:
            self._log(f"{landlord.name} takes the bottom cards and becomes the landlord")

        for player_id in state.player_order:
            self._send(player_id, NoticeType.START_GAME, {
                "hand": list(state.players[player_id].hand),
                "your_turn": player_id == landlord_id,
                "landlord": landlord.name,
                "bottom_cards": list(state.awarded_bottom),
            })
        self._announce_roster()
        self._announce_wager()
        self._broadcast(NoticeType.TURN_UPDATE, {"current_player": landlord.name})

    # ------------------------------------------------------------------
    # play

    def _advance_turn(self):
        state = self.state
        state.current_player_index = (state.current_player_index + 1) % len(state.player_order)

    def play_cards(self, player_id: str, card_ids: List[str]) -> ActionResult:
        rejected = self._guard(Action.PLAY)
        if rejected:
            return rejected

        state = self.state
        if player_id not in state.players:
            return self._ignored(OUT_OF_TURN, f"{player_id} is not seated")

        result = validate_play(state, player_id, card_ids)
        if not result.valid:
            if result.error_code in SILENT_CODES:
                return self._ignored(result.error_code, result.error_message)
            return ActionResult.rejected(result.error_code, result.error_message)

        player = state.players[player_id]
        pattern = result.pattern
        for card_id in card_ids:
            player.hand.remove(card_id)
        played = list(pattern.cards)
        state.discard.extend(played)
        state.table = TableState(cards=played, player_id=player_id)
        state.consecutive_passes = 0

        doubled = pattern.combo in DOUBLING_COMBOS
        if doubled:
            double_wager(state)

        if not player.hand:
            self._broadcast(NoticeType.CARDS_PLAYED, {
                "player": player.name,
                "cards": played,
                "combo": pattern.combo.value,
                "next_player": None,
            })
            if doubled:
                self._announce_wager()
            self._end_round(player_id)
            return self._done("Round over")

        self._advance_turn()
        next_name = self._name(state.current_player_id)
        self._broadcast(NoticeType.CARDS_PLAYED, {
            "player": player.name,
            "cards": played,
            "combo": pattern.combo.value,
            "next_player": next_name,
        })
        if doubled:
            self._log(f"{player.name} played a {pattern.combo.value}; the wager doubles")
            self._announce_wager()
        self._announce_roster()
        self._broadcast(NoticeType.TURN_UPDATE, {"current_player": next_name})
        return self._done("Cards played")

    def pass_turn(self, player_id: str) -> ActionResult:
        rejected = self._guard(Action.PASS)
        if rejected:
            return rejected

        state = self.state
        if player_id not in state.players:
            return self._ignored(OUT_OF_TURN, f"{player_id} is not seated")

        result = validate_pass(state, player_id)
        if not result.valid:
            if result.error_code in SILENT_CODES:
                return self._ignored(result.error_code, result.error_message)
            return ActionResult.rejected(result.error_code, result.error_message)

        state.consecutive_passes += 1
        cleared = state.consecutive_passes >= 2
        if cleared:
            state.table.clear()
            state.consecutive_passes = 0

        self._advance_turn()
        next_name = self._name(state.current_player_id)
        self._broadcast(NoticeType.PLAYER_PASSED, {
            "player": self._name(player_id),
            "next_player": next_name,
            "table_cleared": cleared,
        })
        self._broadcast(NoticeType.TURN_UPDATE, {"current_player": next_name})
        return self._done("Passed")

    def request_hints(self, player_id: str) -> ActionResult:
        rejected = self._guard(Action.HINTS)
        if rejected:
            return rejected
        state = self.state
        if player_id not in state.players:
            return self._ignored(OUT_OF_TURN, f"{player_id} is not seated")
        plays = get_valid_plays(
            state.players[player_id].hand, state.table.cards, state.table.is_empty
        )
        return ActionResult.ok("Hints", reply=Notice(NoticeType.HINTS.value, {"plays": plays}))

    def _end_round(self, winner_id: str):
        state = self.state
        multiplier = state.multiplier
        landlord_id = state.landlord_id
        deltas = apply_round_scores(state, winner_id, self.rules)
        state.last_winner = winner_id

        winner = self._name(winner_id)
        self._log(f"{winner} wins the round!")
        self._broadcast(NoticeType.ROUND_OVER, {
            "winner": winner,
            "landlord": self._name(landlord_id),
            "landlord_won": winner_id == landlord_id,
            "multiplier": multiplier,
            "deltas": {self._name(pid): delta for pid, delta in deltas.items()},
            "scores": {p.name: p.points for p in state.seated()},
        })

        self._clear_round()
        state.phase = Phase.ROUND_OVER
        self._announce_roster()
        self._announce_wager()

    # ------------------------------------------------------------------
    # sessions

    def disconnect(self, player_id: str) -> ActionResult:
        rejected = self._guard(Action.DISCONNECT)
        if rejected:
            return rejected

        state = self.state
        player = state.players.get(player_id)
        if player is None or player_id in state.vacated:
            return self._ignored(WRONG_PHASE, f"{player_id} is not an active seat")

        if state.phase in (Phase.BIDDING, Phase.PLAYING):
            player.connected = False
            state.vacated.append(player_id)
            logger.warning(f"Room {state.id}: {player.name} disconnected, round paused")
            self._broadcast(NoticeType.GAME_PAUSED, {
                "player": player.name,
                "timeout": self.rules.pause_timeout,
            }, exclude=player_id)
            self._announce_roster()
            return self._done("Paused")

        del state.players[player_id]
        self._reseat()
        if state.phase == Phase.ROUND_OVER:
            state.phase = Phase.LOBBY
        self._log(f"{player.name} left {state.name}")
        self._announce_roster()
        return self._done("Removed")

    def _rejoin(self, player: Player) -> ActionResult:
        state = self.state
        player.connected = True
        state.vacated.remove(player.id)
        self._log(f"{player.name} rejoined", announce=False)

        self._send(player.id, NoticeType.STATE_FULL, sanitize_state(state, player.id, self.rules))
        if not state.paused:
            self._broadcast(NoticeType.GAME_RESUMED, {"player": player.name}, exclude=player.id)
        self._announce_roster()
        return self._done("Rejoined", player_id=player.id)

    def reset_game(self, player_id: Optional[str] = None) -> ActionResult:
        """Drop every vacated seat, zero all scores and return to the lobby."""
        rejected = self._guard(Action.RESET)
        if rejected:
            return rejected

        state = self.state
        dropped = [self._name(pid) for pid in state.vacated]
        for vacated_id in state.vacated:
            del state.players[vacated_id]
        state.vacated = []

        for player in state.players.values():
            player.points = 0
        self._clear_round()
        state.last_winner = None
        state.game_log.clear()
        state.player_order = []
        state.phase = Phase.LOBBY
        self._reseat()

        logger.info(f"Room {state.id}: reset, dropped {', '.join(dropped)}")
        self._broadcast(NoticeType.GAME_RESET, {"dropped": dropped})
        self._announce_roster()
        self._announce_wager()
        return self._done("Reset")


class LandlordEngine:
    """Registry of rooms, each serialized behind its own lock."""

    def __init__(self, rules: RuleConfig = default_rules):
        self.rules = rules
        self.rooms: Dict[str, Room] = {}
        self.room_locks = defaultdict(threading.Lock)

    def create_room(self, room_id: str) -> Room:
        with self.room_locks[room_id]:
            if room_id not in self.rooms:
                self.rooms[room_id] = Room(room_id, self.rules)
            return self.rooms[room_id]

    def get_room(self, room_id: str) -> Optional[Room]:
        return self.rooms.get(room_id)

    def remove_room(self, room_id: str):
        with self.room_locks[room_id]:
            self.rooms.pop(room_id, None)
        self.room_locks.pop(room_id, None)

    def dispatch(self, room_id: str, action: Action, player_id: Optional[str] = None,
                 **payload) -> ActionResult:
        """Apply one action to a room to completion before the next one runs."""
        if room_id not in self.rooms:
            return ActionResult.rejected(ROOM_NOT_FOUND, "Room not found")
        with self.room_locks[room_id]:
            room = self.get_room(room_id)
            if room is None:
                return ActionResult.rejected(ROOM_NOT_FOUND, "Room not found")

            if action == Action.JOIN:
                return room.join(payload["name"])
            if action == Action.PLAYER_LIST:
                return room.request_player_list(player_id)
            if action == Action.PICKUP:
                return room.pickup_decision(player_id, payload["take"])
            if action == Action.PLAY:
                return room.play_cards(player_id, payload["cards"])
            if action == Action.PASS:
                return room.pass_turn(player_id)
            if action == Action.RESET:
                return room.reset_game(player_id)
            if action == Action.NEXT_ROUND:
                return room.request_next_round(player_id)
            if action == Action.HINTS:
                return room.request_hints(player_id)
            if action == Action.DISCONNECT:
                return room.disconnect(player_id)
            raise ValueError(f"Unknown action: {action}")
