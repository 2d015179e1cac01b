"""
Tests for card combination classification.
"""

import pytest

from landlord_engine.constants import Combo, JOKER_HIGH, JOKER_LOW
from landlord_engine.patterns import classify, detect_pattern, is_consecutive


def shape(cards):
    combo = detect_pattern(cards)
    return combo.combo, combo.value


def test_single():
    assert shape(["3♠"]) == (Combo.SINGLE, 3)
    assert shape([JOKER_HIGH]) == (Combo.SINGLE, 17)


def test_pair():
    assert shape(["7♠", "7♥"]) == (Combo.PAIR, 7)


def test_triple():
    assert shape(["5♠", "5♥", "5♦"]) == (Combo.TRIPLE, 5)


def test_bomb():
    assert shape(["9♠", "9♥", "9♦", "9♣"]) == (Combo.BOMB, 9)


def test_rocket():
    assert detect_pattern([JOKER_LOW, JOKER_HIGH]).combo == Combo.ROCKET
    assert detect_pattern([JOKER_HIGH, JOKER_LOW]).combo == Combo.ROCKET


def test_triple_with_one():
    assert shape(["K♠", "4♦", "K♥", "K♣"]) == (Combo.TRIPLE_WITH_ONE, 13)


def test_four_of_a_kind_with_one():
    assert shape(["8♠", "8♥", "8♦", "8♣", "3♠"]) == (Combo.FOUR_OF_A_KIND_WITH_ONE, 8)
    # Kicker may outrank the quad; the quad still sets the value
    assert shape(["4♠", "4♥", "4♦", "4♣", JOKER_HIGH]) == (Combo.FOUR_OF_A_KIND_WITH_ONE, 4)


def test_four_with_pair_is_invalid():
    assert detect_pattern(["8♠", "8♥", "8♦", "8♣", "3♠", "3♥"]).combo == Combo.INVALID


def test_straight():
    assert shape(["3♠", "4♠", "5♠", "6♠", "7♠"]) == (Combo.STRAIGHT, 7)
    assert shape(["10♠", "J♥", "Q♦", "K♣", "A♠"]) == (Combo.STRAIGHT, 14)
    assert shape(["9♦", "3♠", "5♥", "7♣", "4♠", "6♦", "8♠"]) == (Combo.STRAIGHT, 9)


@pytest.mark.parametrize("cards", [
    ["3♠", "4♠", "5♠", "6♠", "2♠"],        # 2 breaks a straight
    ["J♠", "Q♠", "K♠", "A♠", "2♠"],
    ["10♠", "J♥", "Q♦", "K♣", JOKER_LOW],
    ["3♠", "4♠", "5♠", "6♠"],              # too short
    ["3♠", "4♠", "5♠", "6♠", "8♠"],        # gap
])
def test_invalid_straights(cards):
    assert detect_pattern(cards).combo == Combo.INVALID


def test_pair_straight():
    assert shape(["3♠", "3♥", "4♠", "4♥", "5♠", "5♥"]) == (Combo.PAIR_STRAIGHT, 5)
    assert shape(["Q♠", "Q♥", "K♠", "K♥", "A♠", "A♥", "J♦", "J♣"]) == (Combo.PAIR_STRAIGHT, 14)


@pytest.mark.parametrize("cards", [
    ["3♠", "3♥", "4♠", "4♥"],                           # only two pairs
    ["K♠", "K♥", "A♠", "A♥", "2♠", "2♥"],               # contains 2
    ["3♠", "3♥", "4♠", "4♥", "5♠", "5♥", "6♠", "7♠"],   # loose singles
    ["3♠", "3♥", "4♠", "4♥", "6♠", "6♥"],               # gap
])
def test_invalid_pair_straights(cards):
    assert detect_pattern(cards).combo == Combo.INVALID


@pytest.mark.parametrize("cards", [
    [],
    ["3♠", "4♠"],
    ["3♠", "3♠"],          # same card twice
    ["3♠", JOKER_LOW],
    [JOKER_LOW + "♠", JOKER_HIGH + "♥"],  # suited jokers
    ["2♠", "2♥", "2♦", "3♠", "3♥"],
    ["not-a-card"],
])
def test_invalid_shapes(cards):
    combo = detect_pattern(cards)
    assert combo.combo == Combo.INVALID
    assert not combo.is_valid


def test_classify_is_order_independent():
    assert classify(["7♠", "5♠", "3♠", "6♠", "4♠"]) == classify(["3♠", "4♠", "5♠", "6♠", "7♠"])


def test_is_consecutive():
    assert is_consecutive([3, 4, 5])
    assert is_consecutive([9])
    assert not is_consecutive([3, 5])
