import logging
import random
from typing import Dict, Iterator

from .errors import RoomNotFound
from .room import Room, new_player_id

logger = logging.getLogger(__name__)


class RoomRegistry:
    """Owns every live Room, keyed by the client-chosen room id."""

    def __init__(self, rng=None, id_factory=new_player_id):
        # Shared by every room this registry creates (shuffles and starters)
        self.rng = rng or random.Random()
        self.id_factory = id_factory
        self._rooms: Dict[str, Room] = {}

    def __len__(self):
        return len(self._rooms)

    def __contains__(self, room_id):
        return room_id in self._rooms

    def __iter__(self) -> Iterator[Room]:
        return iter(list(self._rooms.values()))

    def get(self, room_id) -> Room:
        room = self._rooms.get(room_id)
        if room is None:
            raise RoomNotFound()
        return room

    def create_or_get(self, room_id, allow_create: bool = False) -> Room:
        room = self._rooms.get(room_id)
        if room is not None:
            return room
        if not allow_create:
            raise RoomNotFound()
        room = Room(room_id, rng=self.rng, id_factory=self.id_factory)
        self._rooms[room_id] = room
        logger.info(f"[room-create] room={room_id} rooms={len(self._rooms)}")
        return room

    def remove(self, room_id) -> None:
        if self._rooms.pop(room_id, None) is not None:
            logger.info(f"[room-remove] room={room_id} rooms={len(self._rooms)}")

    def snapshot(self):
        return [room.summary() for room in self]
