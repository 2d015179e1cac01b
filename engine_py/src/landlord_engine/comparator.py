"""
Play comparison: whether a candidate play may follow the one on the table.
"""

from collections import defaultdict
from typing import Dict, List, Optional, Sequence

from .constants import Combo, JOKER_HIGH, JOKER_LOW, card_rank, sort_cards
from .models import Combination
from .patterns import detect_pattern

# Shapes whose length varies, so equal category alone does not imply equal size
VARIABLE_LENGTH_COMBOS = {Combo.STRAIGHT, Combo.PAIR_STRAIGHT}


def beats(candidate: Combination, last: Combination) -> bool:
    """
    Check whether an already classified candidate beats the last accepted play.

    Rocket beats everything; a bomb beats any non-bomb other than the rocket
    and any lower bomb; otherwise only the same shape of the same size with
    a strictly higher value wins.
    """
    if not candidate.is_valid:
        return False

    if candidate.combo == Combo.ROCKET:
        return True

    if candidate.combo == Combo.BOMB and last.combo != Combo.ROCKET:
        if last.combo == Combo.BOMB:
            return candidate.value > last.value
        return True

    if candidate.combo != last.combo:
        return False

    if candidate.combo in VARIABLE_LENGTH_COMBOS and len(candidate) != len(last):
        return False

    return candidate.value > last.value


def can_play(candidate: Sequence[str], last_accepted: Optional[Sequence[str]],
             is_first_of_round: bool = False) -> bool:
    """
    Check if a set of cards is a legal play against the table.

    Args:
        candidate: Cards being played
        last_accepted: Cards of the most recent accepted play
        is_first_of_round: True when the table is empty

    Returns:
        Whether the play is accepted
    """
    candidate_combo = detect_pattern(candidate)
    if is_first_of_round or not last_accepted:
        return candidate_combo.is_valid
    return beats(candidate_combo, detect_pattern(last_accepted))


def _group_by_rank(hand: List[str]) -> Dict[str, List[str]]:
    groups = defaultdict(list)
    for card in sort_cards(hand):
        groups[card_rank(card)].append(card)
    return groups


def get_valid_plays(hand: List[str], last_accepted: Optional[Sequence[str]],
                    is_first_of_round: bool = False) -> List[List[str]]:
    """
    Suggest simple plays from a hand that the table would accept.

    Only singles, pairs, triples, bombs and the rocket are suggested.
    """
    groups = _group_by_rank(hand)
    options: List[List[str]] = []
    for size in (1, 2, 3, 4):
        for cards in groups.values():
            if len(cards) >= size:
                options.append(cards[:size])
    if JOKER_LOW in hand and JOKER_HIGH in hand:
        options.append([JOKER_LOW, JOKER_HIGH])

    return [
        play for play in options
        if can_play(play, last_accepted, is_first_of_round)
    ]
