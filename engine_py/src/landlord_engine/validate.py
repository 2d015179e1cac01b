"""
Validation for card plays.
"""

from collections import Counter
from typing import List, Optional

from .comparator import beats
from .errors import CANNOT_BEAT, INVALID_COMBINATION, MUST_LEAD, NOT_OWNED, OUT_OF_TURN
from .models import Combination, Player, RoomState
from .patterns import detect_pattern


class ValidationResult:
    """Result of play validation."""

    def __init__(
        self,
        valid: bool,
        error_code: Optional[str] = None,
        error_message: Optional[str] = None,
        pattern: Optional[Combination] = None,
    ):
        self.valid = valid
        self.error_code = error_code
        self.error_message = error_message
        self.pattern = pattern

    @classmethod
    def success(cls, pattern: Optional[Combination] = None) -> 'ValidationResult':
        """Create a successful validation result."""
        return cls(valid=True, pattern=pattern)

    @classmethod
    def error(cls, error_code: str, error_message: str) -> 'ValidationResult':
        """Create an error validation result."""
        return cls(valid=False, error_code=error_code, error_message=error_message)


def validate_ownership(player: Player, card_ids: List[str]) -> bool:
    """Check if player owns all the specified cards, each at most once."""
    wanted = Counter(card_ids)
    return all(count == 1 and card in player.hand for card, count in wanted.items())


def validate_turn(state: RoomState, player_id: str) -> ValidationResult:
    if state.current_player_id != player_id:
        return ValidationResult.error(OUT_OF_TURN, "Not your turn")
    return ValidationResult.success()


def validate_play(state: RoomState, player_id: str, card_ids: List[str]) -> ValidationResult:
    """
    Validate a play of cards by a player.

    Args:
        state: Current room state
        player_id: Player attempting the play
        card_ids: Cards being played

    Returns:
        ValidationResult carrying the classified combination on success
    """
    result = validate_turn(state, player_id)
    if not result.valid:
        return result

    player = state.players[player_id]
    if not card_ids or not validate_ownership(player, card_ids):
        return ValidationResult.error(NOT_OWNED, "You can only play cards from your own hand")

    pattern = detect_pattern(card_ids)
    if not pattern.is_valid:
        return ValidationResult.error(INVALID_COMBINATION, "Invalid card combination")

    if state.table.is_empty:
        return ValidationResult.success(pattern)

    last = detect_pattern(state.table.cards)
    if not beats(pattern, last):
        return ValidationResult.error(
            CANNOT_BEAT,
            f"{pattern.combo.value.replace('_', ' ')} cannot beat the "
            f"{last.combo.value.replace('_', ' ')} on the table",
        )
    return ValidationResult.success(pattern)


def validate_pass(state: RoomState, player_id: str) -> ValidationResult:
    result = validate_turn(state, player_id)
    if not result.valid:
        return result
    if state.table.is_empty:
        return ValidationResult.error(MUST_LEAD, "You must lead; nobody has played yet")
    return ValidationResult.success()
