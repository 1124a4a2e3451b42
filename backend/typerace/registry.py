from typing import Callable, Dict, List, Optional

from typerace.errors import RoomNotFound
from typerace.models import Room, generate_room_code


class RoomRegistry:
    """In-memory table of live rooms keyed by code.

    Rooms only exist while they have players: the removal that empties a room
    also drops it from the table.
    """

    def __init__(self, code_length: int = 6, code_factory: Optional[Callable[[], str]] = None):
        self._rooms: Dict[str, Room] = {}
        self._member_of: Dict[str, str] = {}  # player_id -> room code
        self._code_factory = code_factory or (lambda: generate_room_code(code_length))

    def __len__(self):
        return len(self._rooms)

    def __contains__(self, code):
        return _normalize(code) in self._rooms

    def codes(self) -> List[str]:
        return list(self._rooms.keys())

    def rooms(self) -> List[Room]:
        return list(self._rooms.values())

    def memberships(self) -> Dict[str, str]:
        return dict(self._member_of)

    def _fresh_code(self) -> str:
        while True:
            code = self._code_factory()
            if code not in self._rooms:
                return code

    def create_room(self, player_id: str, player_name: str) -> Room:
        self._detach(player_id)
        room = Room(self._fresh_code())
        room.add_player(player_id, player_name)
        self._rooms[room.code] = room
        self._member_of[player_id] = room.code
        return room

    def get_room(self, code: str) -> Room:
        room = self._rooms.get(_normalize(code))
        if room is None:
            raise RoomNotFound(code)
        return room

    def join_room(self, code: str, player_id: str, player_name: str) -> Room:
        room = self.get_room(code)
        if self._member_of.get(player_id) != room.code:
            self._detach(player_id)
        room.add_player(player_id, player_name)
        self._member_of[player_id] = room.code
        return room

    def remove_player(self, code: str, player_id: str) -> Optional[Room]:
        """Remove a player; returns the room if it still has members."""
        room = self.get_room(code)
        room.remove_player(player_id)
        if self._member_of.get(player_id) == room.code:
            del self._member_of[player_id]
        if not room.players:
            self._rooms.pop(room.code, None)
            return None
        return room

    def _detach(self, player_id: str) -> None:
        # A connection sits in at most one room
        code = self._member_of.get(player_id)
        if code is not None:
            self.remove_player(code, player_id)

    def room_of(self, player_id: str) -> Optional[Room]:
        code = self._member_of.get(player_id)
        return self._rooms.get(code) if code is not None else None

    def rooms_for(self, player_id: str) -> List[Room]:
        room = self.room_of(player_id)
        return [room] if room is not None else []


def _normalize(code) -> str:
    return str(code or '').strip().upper()
