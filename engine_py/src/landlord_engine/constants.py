"""Game constants and utilities"""

from enum import Enum
from typing import Dict, List, Optional, Tuple

SUITS = ['♠', '♣', '♦', '♥']
RANKS = ['3', '4', '5', '6', '7', '8', '9', '10', 'J', 'Q', 'K', 'A', '2']

JOKER_LOW = 'JOKER-LOW'
JOKER_HIGH = 'JOKER-HIGH'
JOKER_CARDS = [JOKER_LOW, JOKER_HIGH]

# Stands in for a concealed card during the deal preview
HIDDEN_CARD = 'BACK'

CARD_VALUES: Dict[str, int] = {
    '3': 3, '4': 4, '5': 5, '6': 6, '7': 7, '8': 8, '9': 9, '10': 10,
    'J': 11, 'Q': 12, 'K': 13, 'A': 14, '2': 15,
    JOKER_LOW: 16, JOKER_HIGH: 17,
}
ROCKET_VALUE = 18

# Ranks that may never appear inside a straight or pair straight
NON_SEQUENCE_RANKS = {'2', JOKER_LOW, JOKER_HIGH}

MIN_STRAIGHT_LEN = 5
MIN_PAIR_STRAIGHT_PAIRS = 3

DEFAULT_ROOM_ID = 'pitstop'
DEFAULT_ROOM_NAME = 'The Pitstop'

# Entries kept in a room's running game log
GAME_LOG_LIMIT = 100


class Phase(str, Enum):
    LOBBY = 'lobby'
    DEALING = 'dealing'
    BIDDING = 'bidding'
    PLAYING = 'playing'
    ROUND_OVER = 'round_over'


class Combo(str, Enum):
    SINGLE = 'single'
    PAIR = 'pair'
    TRIPLE = 'triple'
    TRIPLE_WITH_ONE = 'triple_with_one'
    STRAIGHT = 'straight'
    PAIR_STRAIGHT = 'pair_straight'
    FOUR_OF_A_KIND_WITH_ONE = 'four_of_a_kind_with_one'
    BOMB = 'bomb'
    ROCKET = 'rocket'
    INVALID = 'invalid'


# Shapes that double the wager when played
DOUBLING_COMBOS = {Combo.BOMB, Combo.ROCKET}


class Action(str, Enum):
    JOIN = 'join'
    PLAYER_LIST = 'request_player_list'
    PICKUP = 'pickup_decision'
    PLAY = 'play_cards'
    PASS = 'pass'
    RESET = 'reset_game'
    NEXT_ROUND = 'request_next_round'
    HINTS = 'request_hints'
    DISCONNECT = 'disconnect'


class NoticeType(str, Enum):
    """Outbound notification names."""
    JOIN_SUCCESS = 'join_success'
    PLAYER_LIST = 'player_list'
    WAGER = 'wager'
    DEAL_PREVIEW = 'deal_preview'
    BID_PROMPT = 'bid_prompt'
    HANDS_REVEALED = 'hands_revealed'
    START_GAME = 'start_game'
    GAME_MESSAGE = 'game_message'
    CARDS_PLAYED = 'cards_played'
    PLAYER_PASSED = 'player_passed'
    TURN_UPDATE = 'turn_update'
    PLAY_REJECTED = 'play_rejected'
    GAME_PAUSED = 'game_paused'
    GAME_RESUMED = 'game_resumed'
    STATE_FULL = 'state_full'
    GAME_RESET = 'game_reset'
    ROUND_OVER = 'round_over'
    ROOM_FULL = 'room_full'
    HINTS = 'hints'
    ERROR = 'error'


_ALWAYS = {Action.JOIN, Action.PLAYER_LIST, Action.DISCONNECT}

PHASE_ACTIONS: Dict[Phase, set] = {
    Phase.LOBBY: _ALWAYS,
    Phase.DEALING: {Action.PLAYER_LIST},
    Phase.BIDDING: _ALWAYS | {Action.PICKUP},
    Phase.PLAYING: _ALWAYS | {Action.PLAY, Action.PASS, Action.HINTS},
    Phase.ROUND_OVER: _ALWAYS | {Action.NEXT_ROUND},
}

# Overlay applied on top of an active round while a seat is vacated
PAUSED_ACTIONS = _ALWAYS | {Action.RESET}


def create_deck() -> List[str]:
    deck = []
    for suit in SUITS:
        for rank in RANKS:
            deck.append(f"{rank}{suit}")
    deck.extend(JOKER_CARDS)
    return deck


def parse_card(card_id: str) -> Tuple[str, Optional[str]]:
    if card_id in JOKER_CARDS:
        return card_id, None
    rank, suit = card_id[:-1], card_id[-1]
    if rank not in CARD_VALUES or rank in JOKER_CARDS or suit not in SUITS:
        raise ValueError(f"Invalid card: {card_id}")
    return rank, suit


def is_valid_card(card_id: str) -> bool:
    try:
        parse_card(card_id)
    except (ValueError, IndexError):
        return False
    return True


def card_rank(card_id: str) -> str:
    return parse_card(card_id)[0]


def sort_cards(cards: List[str], reverse: bool = False) -> List[str]:
    """Sort cards by rank value, suits in deck order within a rank."""
    def key(card_id):
        rank, suit = parse_card(card_id)
        return CARD_VALUES[rank], SUITS.index(suit) if suit else 0
    return sorted(cards, key=key, reverse=reverse)
