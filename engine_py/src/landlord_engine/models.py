"""Game models and data structures"""

from collections import deque
from dataclasses import dataclass, field
from typing import Any, Deque, Dict, List, Optional

from .constants import Combo, DEFAULT_ROOM_NAME, GAME_LOG_LIMIT, Phase


@dataclass
class Player:
    id: str
    name: str  # stable identity, used to match a rejoin
    seat: int
    hand: List[str] = field(default_factory=list)  # card ids
    points: int = 0
    connected: bool = True

    @property
    def hand_count(self) -> int:
        return len(self.hand)


@dataclass(frozen=True)
class Combination:
    combo: Combo
    value: int
    cards: tuple = ()

    @property
    def is_valid(self) -> bool:
        return self.combo != Combo.INVALID

    def __len__(self) -> int:
        return len(self.cards)


@dataclass
class TableState:
    cards: List[str] = field(default_factory=list)
    player_id: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not self.cards

    def clear(self):
        self.cards = []
        self.player_id = None


@dataclass
class BiddingState:
    origin_seat: int  # seat dealt the face-up reveal card
    pick_index: int
    attempts: int = 0
    revealed: bool = False
    landlord_seat: Optional[int] = None
    forced: bool = False

    @property
    def resolved(self) -> bool:
        return self.landlord_seat is not None


@dataclass
class Notice:
    """An outbound notification produced by a room action.

    ``to`` targets one player; ``exclude`` skips one player of a broadcast.
    """
    event: str
    data: Dict[str, Any] = field(default_factory=dict)
    to: Optional[str] = None
    exclude: Optional[str] = None


@dataclass
class RoomState:
    id: str
    name: str = DEFAULT_ROOM_NAME
    version: int = 0
    phase: Phase = Phase.LOBBY
    players: Dict[str, Player] = field(default_factory=dict)
    player_order: List[str] = field(default_factory=list)
    current_player_index: int = 0
    table: TableState = field(default_factory=TableState)
    consecutive_passes: int = 0
    bottom_cards: List[str] = field(default_factory=list)  # unclaimed only
    awarded_bottom: List[str] = field(default_factory=list)  # shown once a landlord exists
    discard: List[str] = field(default_factory=list)  # cards played this round
    multiplier: int = 1
    landlord_id: Optional[str] = None
    bidding: Optional[BiddingState] = None
    reveal_card: Optional[str] = None
    reveal_owner: Optional[str] = None
    vacated: List[str] = field(default_factory=list)  # player ids awaiting rejoin
    round_number: int = 0
    last_winner: Optional[str] = None
    game_log: Deque[str] = field(default_factory=lambda: deque(maxlen=GAME_LOG_LIMIT))

    @property
    def paused(self) -> bool:
        return bool(self.vacated)

    @property
    def round_active(self) -> bool:
        return self.phase in (Phase.DEALING, Phase.BIDDING, Phase.PLAYING)

    @property
    def current_player_id(self) -> Optional[str]:
        if not self.player_order:
            return None
        return self.player_order[self.current_player_index]

    def seated(self) -> List[Player]:
        return sorted(self.players.values(), key=lambda p: p.seat)

    def player_by_name(self, name: str) -> Optional[Player]:
        for player in self.players.values():
            if player.name == name:
                return player
        return None

    def increment_version(self):
        self.version += 1
