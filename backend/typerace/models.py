from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional
import random
import string
import time

from typerace.errors import DuplicateStart, RaceNotActive, UnknownPlayer


class RoomState(str, Enum):
    WAITING = 'waiting'
    ACTIVE = 'active'
    FINISHED = 'finished'


@dataclass
class PlayerRecord:
    id: str
    name: str
    progress: int = 0
    wpm: float = 0
    accuracy: float = 0
    finished: bool = False

    def to_dict(self, is_host=False):
        return {
            'id': self.id,
            'name': self.name,
            'progress': self.progress,
            'wpm': self.wpm,
            'accuracy': self.accuracy,
            'finished': self.finished,
            'isHost': is_host,
        }


def generate_room_code(length=6):
    """Generate a short, shareable room code (not checked for uniqueness)."""
    return ''.join(random.choices(string.ascii_uppercase + string.digits, k=length))


class Room:
    def __init__(self, code: str):
        self.code = code
        self.players: Dict[str, PlayerRecord] = {}  # player_id -> record, in join order
        self.state = RoomState.WAITING
        self.text = ''
        self.created_at = time.monotonic()
        self.ranking: Optional[List[dict]] = None
        self._frozen = set()  # players whose final wpm/accuracy are in

    @property
    def host(self) -> Optional[PlayerRecord]:
        # First joiner hosts; recomputed so it follows departures
        return next(iter(self.players.values()), None)

    def player_ids(self) -> List[str]:
        return list(self.players.keys())

    def add_player(self, player_id: str, name: str) -> PlayerRecord:
        player = PlayerRecord(id=player_id, name=name)
        self.players[player_id] = player
        return player

    def remove_player(self, player_id: str) -> PlayerRecord:
        try:
            return self.players.pop(player_id)
        except KeyError:
            raise UnknownPlayer(player_id) from None

    def _member(self, player_id: str) -> PlayerRecord:
        player = self.players.get(player_id)
        if player is None:
            raise UnknownPlayer(player_id)
        return player

    def start_race(self, text: str) -> None:
        """Move WAITING -> ACTIVE with the given passage."""
        if self.state != RoomState.WAITING:
            raise DuplicateStart()
        if not text:
            raise ValueError('Race text must not be empty')
        self.text = text
        self.state = RoomState.ACTIVE

    def record_progress(self, player_id: str, progress: int, wpm: float) -> PlayerRecord:
        """Store a client-reported progress/wpm pair.

        Progress never moves backwards: a lower value than the one already
        held keeps the stored value. Reaching the end of the text marks the
        player finished. A finished player's numbers are frozen.
        """
        if self.state != RoomState.ACTIVE:
            raise RaceNotActive()
        player = self._member(player_id)
        if player.finished:
            return player
        progress = max(0, min(int(progress), len(self.text)))
        player.progress = max(player.progress, progress)
        player.wpm = wpm
        if player.progress >= len(self.text):
            player.finished = True
        return player

    def mark_finished(self, player_id: str, wpm: float, accuracy: float) -> PlayerRecord:
        # Late finishers are still recorded after the race has been decided
        if self.state == RoomState.WAITING:
            raise RaceNotActive()
        player = self._member(player_id)
        if player_id in self._frozen:
            return player
        self._frozen.add(player_id)
        player.finished = True
        player.progress = len(self.text)
        player.wpm = wpm
        player.accuracy = accuracy
        return player

    def complete(self, ranking: List[dict]) -> bool:
        """Move ACTIVE -> FINISHED; False when the race was already decided."""
        if self.state != RoomState.ACTIVE:
            return False
        self.ranking = ranking
        self.state = RoomState.FINISHED
        return True

    def players_payload(self) -> Dict[str, dict]:
        host = self.host
        return {
            pid: p.to_dict(is_host=host is not None and host.id == pid)
            for pid, p in self.players.items()
        }

    def to_dict(self):
        host = self.host
        return {
            'code': self.code,
            'state': self.state.value,
            'text': self.text if self.state != RoomState.WAITING else None,
            'host': host.id if host else None,
            'players': [
                p.to_dict(is_host=host is not None and host.id == p.id)
                for p in self.players.values()
            ],
            'ranking': self.ranking,
        }
