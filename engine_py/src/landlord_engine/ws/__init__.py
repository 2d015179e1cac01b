"""
WebSocket wire models for the Landlord game.
"""

from .events import (
    ErrorCode, EventType, InboundEvent, OutboundEventType, OutboundMessage,
    create_message, parse_inbound_event,
)

__all__ = [
    "ErrorCode", "EventType", "InboundEvent", "OutboundEventType",
    "OutboundMessage", "create_message", "parse_inbound_event",
]
