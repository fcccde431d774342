import logging
import random
import threading
import time
from functools import partial
from typing import Callable, Dict, List, Optional

from .room import Room, RoomFullError
from .timer import TURN_DURATION_SEC, TurnTimer

logger = logging.getLogger(__name__)

LOBBY_GROUP = 'home'


class RoomRegistry:
    """Live rooms keyed by token.

    A room is created on the first join to an unseen token and removed as
    soon as its last seat is vacated. Registry operations take the registry
    lock before the room lock; timer callbacks only ever take the room lock.
    """

    def __init__(
        self,
        publisher,
        turn_duration: int = TURN_DURATION_SEC,
        start_task: Optional[Callable] = None,
        sleep: Optional[Callable[[float], None]] = None,
        heartbeat_sec: int = 0,
        rng: Optional[random.Random] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.publisher = publisher
        self.rng = rng or random.Random()
        self._clock = clock
        self._timer_factory = partial(
            TurnTimer,
            duration=turn_duration,
            start_task=start_task,
            sleep=sleep,
            heartbeat_sec=heartbeat_sec,
        )
        self._rooms: Dict[str, Room] = {}
        self._lock = threading.RLock()

    def __contains__(self, token: str) -> bool:
        return token in self._rooms

    def __len__(self) -> int:
        return len(self._rooms)

    def get(self, token: str) -> Optional[Room]:
        return self._rooms.get(token)

    def tokens(self) -> List[str]:
        with self._lock:
            return list(self._rooms)

    def find_room_by_sid(self, sid: str) -> Optional[Room]:
        with self._lock:
            for room in self._rooms.values():
                if room.has_seat(sid):
                    return room
        return None

    def join(self, token: str, sid: str) -> Room:
        """Seat ``sid`` in room ``token``, creating the room if needed.

        Raises RoomFullError when the room already has two seats.
        """
        with self._lock:
            room = self._rooms.get(token)
            if room is not None and room.is_full and not room.has_seat(sid):
                raise RoomFullError(token)
            current = self.find_room_by_sid(sid)
            if current is not None and current.token != token:
                logger.info(f"[room-switch] sid={sid} from={current.token} to={token}")
                self._leave_room(current, sid)
            if room is None:
                room = self._create(token)
            room.join(sid)
            return room

    def leave(self, sid: str) -> Optional[Room]:
        with self._lock:
            room = self.find_room_by_sid(sid)
            if room is None:
                return None
            self._leave_room(room, sid)
            return room

    def listing(self) -> List[dict]:
        with self._lock:
            return [room.summary() for room in self._rooms.values()]

    def broadcast_listing(self) -> None:
        self.publisher.emit('roomsUpdate', self.listing(), to=LOBBY_GROUP)

    def _create(self, token: str) -> Room:
        room = Room(
            token,
            self.publisher,
            rng=self.rng,
            created_at=int(self._clock() * 1000),
            timer_factory=self._timer_factory,
        )
        self._rooms[token] = room
        logger.info(f"[room-create] room={token}")
        return room

    def _leave_room(self, room: Room, sid: str) -> None:
        if room.leave(sid) == 0:
            room.timer.cancel()
            self._rooms.pop(room.token, None)
            logger.info(f"[room-delete] room={room.token}")
