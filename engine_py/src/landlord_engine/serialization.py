"""
State serialization and sanitization utilities.
"""

from typing import Any, Dict, Optional

from .constants import HIDDEN_CARD
from .models import Player, RoomState
from .rules import RuleConfig, default_rules
from .scoring import wager_snapshot


def _name(state: RoomState, player_id: Optional[str]) -> Optional[str]:
    if player_id and player_id in state.players:
        return state.players[player_id].name
    return None


def serialize_player_for_list(player: Player) -> Dict[str, Any]:
    """Serialize player for the roster."""
    return {
        "name": player.name,
        "seat": player.seat,
        "hand_count": player.hand_count,
        "points": player.points,
        "connected": player.connected,
    }


def roster_snapshot(state: RoomState) -> Dict[str, Any]:
    return {
        "room_name": state.name,
        "players": [serialize_player_for_list(p) for p in state.seated()],
        "landlord": _name(state, state.landlord_id),
    }


def deal_preview(state: RoomState, viewer_id: str) -> Dict[str, Any]:
    """
    Initial deal as seen by one seat: its own cards, the others face down,
    and the reveal card with its owner shown to everyone.
    """
    others = {
        p.name: [HIDDEN_CARD] * p.hand_count
        for p in state.seated() if p.id != viewer_id
    }
    return {
        "hand": list(state.players[viewer_id].hand),
        "others": others,
        "reveal": {
            "card": state.reveal_card,
            "owner": _name(state, state.reveal_owner),
        },
    }


def revealed_hands(state: RoomState) -> Dict[str, Any]:
    return {"hands": {p.name: list(p.hand) for p in state.seated()}}


def table_snapshot(state: RoomState) -> Dict[str, Any]:
    return {
        "cards": list(state.table.cards),
        "player": _name(state, state.table.player_id),
        "consecutive_passes": state.consecutive_passes,
    }


def sanitize_state(state: RoomState, viewer_id: Optional[str] = None,
                   rules: RuleConfig = default_rules) -> Dict[str, Any]:
    """
    Sanitize room state for transmission to one client.

    Args:
        state: Room state to sanitize
        viewer_id: ID of the player viewing the state (to show their cards)

    Returns:
        Sanitized state dictionary safe for JSON transmission
    """
    bidding = state.bidding
    sanitized = {
        "id": state.id,
        "version": state.version,
        "phase": state.phase.value,
        "paused": state.paused,
        "round": state.round_number,
        "roster": roster_snapshot(state),
        "wager": wager_snapshot(state, rules),
        "table": table_snapshot(state),
        "current_player": _name(state, state.current_player_id) if state.round_active else None,
        "landlord": _name(state, state.landlord_id),
        "bottom_cards": list(state.awarded_bottom),
        "last_winner": _name(state, state.last_winner),
        "log": list(state.game_log),
        "bidding": None,
        "hand": [],
    }

    if bidding is not None and not bidding.resolved:
        sanitized["bidding"] = {
            "player": _name(state, state.player_order[bidding.pick_index]),
            "attempts": bidding.attempts,
            "revealed": bidding.revealed,
            "reveal": {"card": state.reveal_card, "owner": _name(state, state.reveal_owner)},
        }
        if bidding.revealed:
            sanitized["bidding"].update(revealed_hands(state))

    if viewer_id in state.players:
        sanitized["hand"] = list(state.players[viewer_id].hand)

    return sanitized


def get_public_room_info(state: RoomState, rules: RuleConfig = default_rules) -> Dict[str, Any]:
    """Get public information about a room for listings."""
    return {
        "id": state.id,
        "name": state.name,
        "phase": state.phase.value,
        "paused": state.paused,
        "player_count": len(state.players),
        "max_players": rules.max_players,
        "last_winner": _name(state, state.last_winner),
        "players": [serialize_player_for_list(p) for p in state.seated()],
    }
