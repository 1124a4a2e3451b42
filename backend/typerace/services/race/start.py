from enum import Enum

from typerace.errors import DuplicateStart, NotEnoughPlayers, NotHost
from typerace.models import Room, RoomState


class StartPolicy(str, Enum):
    AUTO = 'auto'
    HOST = 'host'


def should_auto_start(room: Room, min_players: int) -> bool:
    return room.state == RoomState.WAITING and len(room.players) >= min_players


def can_host_start(room: Room, player_id: str, min_players: int) -> None:
    """Raise unless `player_id` may start the race in `room` right now."""
    if room.state != RoomState.WAITING:
        raise DuplicateStart()
    host = room.host
    if host is None or host.id != player_id:
        raise NotHost()
    if len(room.players) < min_players:
        raise NotEnoughPlayers(f'At least {min_players} players are required to start')
