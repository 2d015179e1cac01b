"""
Card combination classification.

Shapes are decided from rank counts alone; the comparable value of a
combination is the value of its representative rank (the highest rank of
a straight or pair straight).
"""

from collections import Counter
from typing import Iterable, List

from .constants import (
    CARD_VALUES, Combo, JOKER_HIGH, JOKER_LOW, MIN_PAIR_STRAIGHT_PAIRS,
    MIN_STRAIGHT_LEN, NON_SEQUENCE_RANKS, ROCKET_VALUE, card_rank, is_valid_card,
    sort_cards,
)
from .models import Combination


def _invalid(cards: List[str]) -> Combination:
    return Combination(Combo.INVALID, 0, tuple(cards))


def is_consecutive(values: List[int]) -> bool:
    """Check that already sorted values step by exactly one."""
    return all(b - a == 1 for a, b in zip(values, values[1:]))


def _sequence_value(ranks: Iterable[str]) -> int:
    """Highest value of a run, or 0 if the ranks do not form one."""
    ranks = list(ranks)
    if any(rank in NON_SEQUENCE_RANKS for rank in ranks):
        return 0
    values = sorted(CARD_VALUES[rank] for rank in ranks)
    if not is_consecutive(values):
        return 0
    return values[-1]


def detect_pattern(card_ids: Iterable[str]) -> Combination:
    """
    Classify a set of cards into one of the fixed shapes.

    Args:
        card_ids: Cards being played, in any order

    Returns:
        Combination with the shape and comparable value, or an invalid
        combination when no shape matches
    """
    cards = list(card_ids)
    n = len(cards)
    if n == 0 or len(set(cards)) != n or not all(is_valid_card(c) for c in cards):
        return _invalid(cards)
    cards = sort_cards(cards)

    counts = Counter(card_rank(c) for c in cards)
    # Most common first; ties keep the lower rank first since cards are sorted
    by_count = counts.most_common()
    top_rank, top_count = by_count[0]

    if n == 2 and set(counts) == {JOKER_LOW, JOKER_HIGH}:
        return Combination(Combo.ROCKET, ROCKET_VALUE, tuple(cards))

    if n == 4 and top_count == 4:
        return Combination(Combo.BOMB, CARD_VALUES[top_rank], tuple(cards))

    if top_count == n and n <= 3:
        combo = {1: Combo.SINGLE, 2: Combo.PAIR, 3: Combo.TRIPLE}[n]
        return Combination(combo, CARD_VALUES[top_rank], tuple(cards))

    if n == 4 and top_count == 3:
        return Combination(Combo.TRIPLE_WITH_ONE, CARD_VALUES[top_rank], tuple(cards))

    # The kicker of a quad is a single card; any other five-card quad shape is invalid
    if n == 5 and top_count == 4:
        return Combination(Combo.FOUR_OF_A_KIND_WITH_ONE, CARD_VALUES[top_rank], tuple(cards))

    if n >= MIN_STRAIGHT_LEN and top_count == 1:
        value = _sequence_value(counts)
        if value:
            return Combination(Combo.STRAIGHT, value, tuple(cards))

    if (n >= MIN_PAIR_STRAIGHT_PAIRS * 2 and n % 2 == 0
            and all(count == 2 for count in counts.values())):
        value = _sequence_value(counts)
        if value:
            return Combination(Combo.PAIR_STRAIGHT, value, tuple(cards))

    return _invalid(cards)


def classify(card_ids: Iterable[str]) -> Combination:
    """Alias of :func:`detect_pattern`."""
    return detect_pattern(card_ids)
