import logging
import threading
from typing import Dict, List, Optional

from liarsdice.models import Room

log = logging.getLogger(__name__)


class RoomRegistry:
    """Process-lifetime mapping of room name to Room.

    Rooms are created on first join and dropped once their last member leaves.
    """

    def __init__(self):
        self._rooms: Dict[str, Room] = {}
        self._lock = threading.Lock()

    def __contains__(self, name: str) -> bool:
        return name in self._rooms

    def __len__(self) -> int:
        return len(self._rooms)

    def get(self, name: str) -> Optional[Room]:
        return self._rooms.get(name)

    def get_or_create(self, name: str) -> Room:
        with self._lock:
            room = self._rooms.get(name)
            if room is None:
                log.info(f"[room-create] room={name}")
                room = Room(name)
                self._rooms[name] = room
            return room

    def remove(self, name: str) -> Optional[Room]:
        with self._lock:
            room = self._rooms.pop(name, None)
        if room is not None:
            if room.timer is not None:
                room.timer.cancel()
                room.timer = None
            log.info(f"[room-remove] room={name}")
        return room

    def names(self) -> List[str]:
        return sorted(self._rooms)

    def rooms(self) -> List[Room]:
        return [self._rooms[n] for n in self.names()]
