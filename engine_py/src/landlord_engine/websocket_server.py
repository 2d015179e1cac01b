"""WebSocket server for real-time multiplayer communication"""

import functools
import logging
import uuid
from typing import Dict, List, Optional

import orjson
from fastapi import WebSocket, WebSocketDisconnect

from .constants import DEFAULT_ROOM_ID, Action, NoticeType
from .engine import ActionResult, LandlordEngine
from .errors import (
    CANNOT_BEAT, INVALID_COMBINATION, MUST_LEAD, NOT_OWNED, ROOM_FULL,
)
from .models import Notice, RoomState
from .rules import RuleConfig, rules_from_env
from .serialization import roster_snapshot
from .session import DeadlineRegistry, SessionRegistry
from .ws.events import (
    ErrorCode, JoinEvent, OutboundMessage, PickupDecisionEvent, PlayCardsEvent,
    RequestPlayerListEvent, create_error_event, create_join_success_event,
    create_message, create_rejection_event, create_room_full_event,
    parse_inbound_event,
)

logger = logging.getLogger(__name__)

PLAY_REJECTION_CODES = {INVALID_COMBINATION, CANNOT_BEAT, NOT_OWNED, MUST_LEAD}


class ConnectionManager:
    def __init__(self):
        self.active_connections: Dict[str, WebSocket] = {}

    async def connect(self, websocket: WebSocket, connection_id: str):
        await websocket.accept()
        self.active_connections[connection_id] = websocket
        logger.info(f"Connection {connection_id} opened")

    def disconnect(self, connection_id: str):
        if connection_id in self.active_connections:
            del self.active_connections[connection_id]
            logger.info(f"Connection {connection_id} closed")

    async def send_personal_message(self, message: OutboundMessage, connection_id: str) -> bool:
        websocket = self.active_connections.get(connection_id)
        if websocket is None:
            return False
        try:
            await websocket.send_text(orjson.dumps(message.to_wire()).decode())
            return True
        except Exception as e:
            logger.error(f"Error sending message to {connection_id}: {e}")
            return False


class GameWebSocketManager:
    def __init__(self, rules: Optional[RuleConfig] = None):
        self.rules = rules or rules_from_env()
        self.engine = LandlordEngine(self.rules)
        self.connection_manager = ConnectionManager()
        self.sessions = SessionRegistry()
        self.deadlines = DeadlineRegistry()

    async def handle_websocket(self, websocket: WebSocket, room_id: Optional[str] = None):
        connection_id = str(uuid.uuid4())[:8]
        await self.connection_manager.connect(websocket, connection_id)

        try:
            while True:
                data = await websocket.receive_text()
                await self.handle_message(data, connection_id, room_id)
        except WebSocketDisconnect:
            logger.info(f"WebSocket disconnected for connection {connection_id}")
        finally:
            await self.handle_disconnect(connection_id)

    async def handle_message(self, raw: str, connection_id: str, path_room_id: Optional[str] = None):
        try:
            event = parse_inbound_event(orjson.loads(raw))
        except ValueError as e:
            # orjson.JSONDecodeError is a ValueError too
            await self.connection_manager.send_personal_message(
                create_error_event(ErrorCode.INVALID_EVENT, str(e)), connection_id
            )
            return

        try:
            await self.handle_event(event, connection_id, path_room_id)
        except Exception as e:
            logger.exception(f"Error handling {event.type.value} from {connection_id}")
            await self.connection_manager.send_personal_message(
                create_error_event(ErrorCode.INTERNAL, str(e)), connection_id
            )

    async def handle_event(self, event, connection_id: str, path_room_id: Optional[str] = None):
        binding = self.sessions.lookup(connection_id)

        if isinstance(event, JoinEvent):
            if binding is not None:
                logger.debug(f"Connection {connection_id} already seated in {binding.room_id}")
                return
            room_id = path_room_id or event.room_id
            room = self.engine.create_room(room_id)
            result = self.engine.dispatch(room_id, Action.JOIN, name=event.name)
            if result.success:
                self.sessions.bind(connection_id, room_id, result.player_id)
                name = room.state.players[result.player_id].name
                await self.connection_manager.send_personal_message(
                    create_join_success_event(result.player_id, name, room_id), connection_id
                )
            await self.deliver(room_id, result, connection_id)
            if not room.state.players:
                self.engine.remove_room(room_id)
            return

        if isinstance(event, RequestPlayerListEvent):
            if binding is not None:
                room_id, player_id = binding.room_id, binding.player_id
            else:
                room_id, player_id = path_room_id or event.room_id or DEFAULT_ROOM_ID, None
            if self.engine.get_room(room_id) is None:
                # Nobody has joined yet; answer without opening the room
                empty = RoomState(id=room_id, name=self.rules.room_name)
                await self.connection_manager.send_personal_message(
                    create_message(NoticeType.PLAYER_LIST, roster_snapshot(empty)), connection_id
                )
                return
            result = self.engine.dispatch(room_id, Action.PLAYER_LIST, player_id)
            await self.deliver(room_id, result, connection_id)
            return

        if binding is None:
            await self.connection_manager.send_personal_message(
                create_error_event(ErrorCode.NOT_JOINED, "Join a room first"), connection_id
            )
            return

        payload = {}
        if isinstance(event, PickupDecisionEvent):
            payload["take"] = event.take
        elif isinstance(event, PlayCardsEvent):
            payload["cards"] = event.cards

        result = self.engine.dispatch(binding.room_id, event.action, binding.player_id, **payload)
        await self.deliver(binding.room_id, result, connection_id)

    async def deliver(self, room_id: str, result: ActionResult, connection_id: Optional[str] = None):
        """Send an action's outcome: errors to the actor, notices to their targets."""
        send = self.connection_manager.send_personal_message

        if result.reply is not None and connection_id:
            await send(create_message(result.reply.event, result.reply.data), connection_id)

        if not result.success:
            if result.silent:
                logger.debug(f"Ignored action from {connection_id}: {result.message}")
            elif connection_id is None:
                logger.warning(f"Room {room_id}: {result.error_code} {result.message}")
            elif result.error_code == ROOM_FULL:
                room = self.engine.get_room(room_id)
                await send(create_room_full_event(room.state.name if room else room_id), connection_id)
            elif result.error_code in PLAY_REJECTION_CODES:
                await send(create_rejection_event(result.error_code, result.message), connection_id)
            else:
                await send(create_message(NoticeType.ERROR, {
                    "code": result.error_code,
                    "message": result.message,
                }), connection_id)
            return

        dead: List[str] = []
        for notice in result.notices:
            dead.extend(await self.publish(room_id, notice))
        self.sync_pause_deadline(room_id)

        for dead_connection in set(dead):
            await self.handle_disconnect(dead_connection)

    async def publish(self, room_id: str, notice: Notice) -> List[str]:
        """Send one notice to every bound connection it targets; returns dead connections."""
        message = create_message(notice.event, notice.data)
        dead = []
        for binding in self.sessions.bindings_in(room_id):
            if notice.to is not None and binding.player_id != notice.to:
                continue
            if notice.exclude is not None and binding.player_id == notice.exclude:
                continue
            delivered = await self.connection_manager.send_personal_message(
                message, binding.connection_id
            )
            if not delivered:
                dead.append(binding.connection_id)
        return dead

    def sync_pause_deadline(self, room_id: str):
        room = self.engine.get_room(room_id)
        paused = room is not None and room.state.paused
        if not paused:
            self.deadlines.cancel(room_id)
        elif self.rules.enforce_pause_timeout and self.rules.pause_timeout > 0:
            self.deadlines.arm(
                room_id, self.rules.pause_timeout,
                functools.partial(self.expire_pause, room_id),
            )

    async def expire_pause(self, room_id: str):
        logger.warning(f"Room {room_id}: pause expired, resetting")
        result = self.engine.dispatch(room_id, Action.RESET)
        await self.deliver(room_id, result)

    async def handle_disconnect(self, connection_id: str):
        self.connection_manager.disconnect(connection_id)
        binding = self.sessions.unbind(connection_id)
        if binding is None:
            return

        result = self.engine.dispatch(binding.room_id, Action.DISCONNECT, binding.player_id)
        await self.deliver(binding.room_id, result)

        room = self.engine.get_room(binding.room_id)
        if room is not None and not room.state.players:
            self.deadlines.cancel(binding.room_id)
            self.engine.remove_room(binding.room_id)
            logger.info(f"Room {binding.room_id} closed, no players left")


# Global instance
game_manager = GameWebSocketManager()
