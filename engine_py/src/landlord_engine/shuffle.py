"""
Card shuffling and dealing utilities.
"""

import random
from dataclasses import dataclass
from typing import List, Optional

from .constants import create_deck, sort_cards
from .errors import INTERNAL_ERROR, raise_error


@dataclass
class Deal:
    """Result of dealing one round."""
    hands: List[List[str]]  # indexed by seat
    bottom: List[str]
    reveal_card: str
    reveal_seat: int


def shuffle_deck(deck: List[str], seed: Optional[int] = None,
                 rng: Optional[random.Random] = None) -> List[str]:
    """
    Shuffle a deck deterministically if seed is provided.

    Args:
        deck: List of card IDs to shuffle
        seed: Optional seed for deterministic shuffling
        rng: Optional random source, takes precedence over seed

    Returns:
        Shuffled copy of the deck
    """
    deck_copy = deck.copy()

    if rng is None:
        rng = random.Random(seed) if seed is not None else random.Random()
    rng.shuffle(deck_copy)

    return deck_copy


def deal_cards(deck: List[str], seat_count: int = 3, hand_size: int = 17,
               bottom_size: int = 3, rng: Optional[random.Random] = None) -> Deal:
    """
    Deal cards round-robin to every seat and set the bottom cards aside.

    One of the dealt cards is picked as the face-up reveal card; the seat
    holding it is offered the bottom cards first.

    Args:
        deck: Shuffled deck of cards
        seat_count: Number of seats to deal to
        hand_size: Cards per seat
        bottom_size: Cards withheld after the deal

    Returns:
        The dealt hands, bottom cards and reveal card
    """
    dealt = seat_count * hand_size
    if len(deck) < dealt + bottom_size:
        raise_error(INTERNAL_ERROR, f"Deck of {len(deck)} cannot deal {dealt} + {bottom_size}")

    hands: List[List[str]] = [[] for _ in range(seat_count)]
    for i, card in enumerate(deck[:dealt]):
        hands[i % seat_count].append(card)

    rng = rng or random.Random()
    reveal_index = rng.randrange(dealt)

    return Deal(
        hands=[sort_cards(hand) for hand in hands],
        bottom=list(deck[dealt:dealt + bottom_size]),
        reveal_card=deck[reveal_index],
        reveal_seat=reveal_index % seat_count,
    )


def new_round_deal(seat_count: int = 3, hand_size: int = 17, bottom_size: int = 3,
                   rng: Optional[random.Random] = None) -> Deal:
    """Build, shuffle and deal a fresh 54-card deck."""
    rng = rng or random.Random()
    deck = shuffle_deck(create_deck(), rng=rng)
    return deal_cards(deck, seat_count, hand_size, bottom_size, rng=rng)
