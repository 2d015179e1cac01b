"""
Session bookkeeping: which transport connection speaks for which seat, and
the per-room pause deadline.

Game state never stores a connection; it only knows player ids. A
connection is bound to ``(room_id, player_id)`` after a successful join and
can be rebound when the same player comes back on a new connection.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Binding:
    connection_id: str
    room_id: str
    player_id: str


class SessionRegistry:
    def __init__(self):
        self._by_connection: Dict[str, Binding] = {}
        self._by_player: Dict[tuple, str] = {}  # (room_id, player_id) -> connection_id

    def bind(self, connection_id: str, room_id: str, player_id: str) -> Optional[str]:
        """
        Bind a connection to a seat, replacing any previous connection of
        that seat.

        Returns:
            The connection id that was displaced, if any
        """
        self.unbind(connection_id)
        key = (room_id, player_id)
        displaced = self._by_player.get(key)
        if displaced is not None:
            self._by_connection.pop(displaced, None)
        self._by_connection[connection_id] = Binding(connection_id, room_id, player_id)
        self._by_player[key] = connection_id
        return displaced

    def unbind(self, connection_id: str) -> Optional[Binding]:
        binding = self._by_connection.pop(connection_id, None)
        if binding is not None:
            key = (binding.room_id, binding.player_id)
            if self._by_player.get(key) == connection_id:
                del self._by_player[key]
        return binding

    def lookup(self, connection_id: str) -> Optional[Binding]:
        return self._by_connection.get(connection_id)

    def connection_for(self, room_id: str, player_id: str) -> Optional[str]:
        return self._by_player.get((room_id, player_id))

    def bindings_in(self, room_id: str) -> List[Binding]:
        return [b for b in self._by_connection.values() if b.room_id == room_id]


class PauseDeadline:
    """A cancellable countdown that runs a coroutine once it expires."""

    def __init__(self, seconds: float, on_expire: Callable[[], Awaitable[None]]):
        self.seconds = seconds
        self.on_expire = on_expire
        self._task: Optional[asyncio.Task] = None

    @property
    def active(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self):
        if self.active:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())

    async def _run(self):
        try:
            await asyncio.sleep(self.seconds)
        except asyncio.CancelledError:
            return
        # Expired; cancelling from inside on_expire must not cancel this task
        self._task = None
        await self.on_expire()

    def cancel(self):
        if self.active:
            self._task.cancel()
        self._task = None


class DeadlineRegistry:
    """At most one pause deadline per room."""

    def __init__(self):
        self._deadlines: Dict[str, PauseDeadline] = {}

    def arm(self, room_id: str, seconds: float,
            on_expire: Callable[[], Awaitable[None]]) -> PauseDeadline:
        existing = self._deadlines.get(room_id)
        if existing is not None and existing.active:
            return existing
        deadline = PauseDeadline(seconds, on_expire)
        self._deadlines[room_id] = deadline
        deadline.start()
        logger.info(f"Pause deadline armed for room {room_id} ({seconds}s)")
        return deadline

    def cancel(self, room_id: str) -> bool:
        deadline = self._deadlines.pop(room_id, None)
        if deadline is None:
            return False
        was_active = deadline.active
        deadline.cancel()
        if was_active:
            logger.info(f"Pause deadline cancelled for room {room_id}")
        return was_active

    def is_armed(self, room_id: str) -> bool:
        deadline = self._deadlines.get(room_id)
        return deadline is not None and deadline.active
