"""
WebSocket event models and validation.
"""

import time
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field, ValidationError, field_validator

from ..constants import DEFAULT_ROOM_ID, Action, NoticeType, is_valid_card


class EventType(str, Enum):
    """Inbound event types."""
    JOIN = Action.JOIN.value
    REQUEST_PLAYER_LIST = Action.PLAYER_LIST.value
    PICKUP_DECISION = Action.PICKUP.value
    PLAY_CARDS = Action.PLAY.value
    PASS = Action.PASS.value
    RESET_GAME = Action.RESET.value
    REQUEST_NEXT_ROUND = Action.NEXT_ROUND.value
    REQUEST_HINTS = Action.HINTS.value


# Outbound names are shared with the engine's notices
OutboundEventType = NoticeType


class ErrorCode(str, Enum):
    """Error codes for client events."""
    INVALID_EVENT = "INVALID_EVENT"
    NOT_JOINED = "NOT_JOINED"
    INTERNAL = "INTERNAL_ERROR"


# Inbound event models
class BaseEvent(BaseModel):
    """Base event model."""
    type: EventType

    @property
    def action(self) -> Action:
        return Action(self.type.value)


class JoinEvent(BaseEvent):
    """Join room event."""
    type: EventType = EventType.JOIN
    room_id: str = Field(default=DEFAULT_ROOM_ID, min_length=1, max_length=50)
    name: str = Field(..., min_length=1, max_length=30)

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        if not v.strip():
            raise ValueError('name must not be blank')
        return v.strip()


class RequestPlayerListEvent(BaseEvent):
    """Roster request, allowed before joining."""
    type: EventType = EventType.REQUEST_PLAYER_LIST
    room_id: Optional[str] = Field(default=None, max_length=50)


class PickupDecisionEvent(BaseEvent):
    """Take or pass on the bottom cards."""
    type: EventType = EventType.PICKUP_DECISION
    take: bool


class PlayCardsEvent(BaseEvent):
    """Play cards event."""
    type: EventType = EventType.PLAY_CARDS
    cards: List[str] = Field(..., min_length=1, max_length=20)

    @field_validator('cards')
    @classmethod
    def validate_cards(cls, v):
        bad = [card for card in v if not is_valid_card(card)]
        if bad:
            raise ValueError(f"unknown cards: {', '.join(bad)}")
        return v


class PassEvent(BaseEvent):
    """Pass turn event."""
    type: EventType = EventType.PASS


class ResetGameEvent(BaseEvent):
    """Reset a paused room."""
    type: EventType = EventType.RESET_GAME


class RequestNextRoundEvent(BaseEvent):
    """Deal the next round after one ends."""
    type: EventType = EventType.REQUEST_NEXT_ROUND


class RequestHintsEvent(BaseEvent):
    """Ask for plays the table would accept."""
    type: EventType = EventType.REQUEST_HINTS


# Union type for all inbound events
InboundEvent = Union[
    JoinEvent,
    RequestPlayerListEvent,
    PickupDecisionEvent,
    PlayCardsEvent,
    PassEvent,
    ResetGameEvent,
    RequestNextRoundEvent,
    RequestHintsEvent,
]

EVENT_MAP = {
    EventType.JOIN: JoinEvent,
    EventType.REQUEST_PLAYER_LIST: RequestPlayerListEvent,
    EventType.PICKUP_DECISION: PickupDecisionEvent,
    EventType.PLAY_CARDS: PlayCardsEvent,
    EventType.PASS: PassEvent,
    EventType.RESET_GAME: ResetGameEvent,
    EventType.REQUEST_NEXT_ROUND: RequestNextRoundEvent,
    EventType.REQUEST_HINTS: RequestHintsEvent,
}


# Outbound event models
class OutboundMessage(BaseModel):
    """Envelope for every message sent to a client."""
    type: str
    data: Dict[str, Any] = Field(default_factory=dict)
    timestamp: float

    def to_wire(self) -> Dict[str, Any]:
        return {"type": self.type, **self.data, "timestamp": self.timestamp}


def parse_inbound_event(data: Dict[str, Any]) -> InboundEvent:
    """
    Parse raw event data into appropriate event model.

    Args:
        data: Raw event data from WebSocket

    Returns:
        Parsed event model

    Raises:
        ValueError: If event type is invalid or data is malformed
    """
    if not isinstance(data, dict):
        raise ValueError("Event must be a JSON object")

    event_type = data.get("type")

    if not event_type:
        raise ValueError("Missing event type")

    try:
        event_type = EventType(event_type)
    except ValueError:
        raise ValueError(f"Invalid event type: {event_type}")

    event_class = EVENT_MAP[event_type]

    try:
        return event_class(**data)
    except ValidationError as e:
        raise ValueError(f"Invalid event data: {e.errors(include_url=False)}")


def create_message(event: str, data: Optional[Dict[str, Any]] = None) -> OutboundMessage:
    """Create an outbound message."""
    return OutboundMessage(type=str(getattr(event, "value", event)), data=data or {},
                           timestamp=time.time())


def create_error_event(code: ErrorCode, message: str) -> OutboundMessage:
    """Create an error event."""
    return create_message(NoticeType.ERROR, {"code": code.value, "message": message})


def create_rejection_event(code: str, message: str) -> OutboundMessage:
    """Create a rejected-play notice for the acting seat."""
    return create_message(NoticeType.PLAY_REJECTED, {"code": code, "reason": message})


def create_join_success_event(player_id: str, name: str, room_id: str) -> OutboundMessage:
    """Create a join success event."""
    return create_message(NoticeType.JOIN_SUCCESS, {
        "player_id": player_id,
        "name": name,
        "room_id": room_id,
    })


def create_room_full_event(room_name: str) -> OutboundMessage:
    return create_message(NoticeType.ROOM_FULL, {"room_name": room_name})
