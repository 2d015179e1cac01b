# engine_py/src/landlord_engine/scoring.py

from typing import Dict, List

from .models import RoomState
from .rules import RuleConfig, default_rules


def compute_round_deltas(player_order: List[str], landlord_id: str, winner_id: str,
                         multiplier: int, rules: RuleConfig = default_rules) -> Dict[str, int]:
    """
    Compute each seat's point change for a finished round.

    The landlord wins or loses ``base_landlord * multiplier``; each farmer
    loses or wins ``base_farmer * multiplier`` the other way.

    Args:
        player_order: The three seated player ids
        landlord_id: Player who took the bottom cards
        winner_id: Player who emptied their hand first
        multiplier: Wager multiplier at the moment the round ended

    Returns:
        Mapping of player id to signed point delta
    """
    landlord_won = winner_id == landlord_id
    landlord_delta = rules.landlord_stake(multiplier)
    farmer_delta = rules.farmer_stake(multiplier)

    deltas = {}
    for player_id in player_order:
        if player_id == landlord_id:
            deltas[player_id] = landlord_delta if landlord_won else -landlord_delta
        else:
            deltas[player_id] = -farmer_delta if landlord_won else farmer_delta
    return deltas


def apply_round_scores(state: RoomState, winner_id: str,
                       rules: RuleConfig = default_rules) -> Dict[str, int]:
    """Add the round's deltas to every seat's cumulative points."""
    deltas = compute_round_deltas(
        state.player_order, state.landlord_id, winner_id, state.multiplier, rules
    )
    for player_id, delta in deltas.items():
        state.players[player_id].points += delta
    return deltas


def double_wager(state: RoomState) -> int:
    state.multiplier *= 2
    return state.multiplier


def wager_snapshot(state: RoomState, rules: RuleConfig = default_rules) -> dict:
    """Current stakes for the landlord and each farmer."""
    return {
        "multiplier": state.multiplier,
        "landlord_stake": rules.landlord_stake(state.multiplier),
        "farmer_stake": rules.farmer_stake(state.multiplier),
    }
