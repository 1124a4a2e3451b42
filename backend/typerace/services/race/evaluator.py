from enum import Enum
from typing import Iterable, List, Optional

from typerace.models import PlayerRecord, Room, RoomState


class CompletionRule(str, Enum):
    FIRST_TO_FINISH = 'first-to-finish'
    ALL_FINISH = 'all-finish'


def rank_players(players: Iterable[PlayerRecord]) -> List[dict]:
    """Order players by wpm, best first.

    Equal wpm keeps the incoming (join) order since the sort is stable.
    """
    ordered = sorted(players, key=lambda p: p.wpm, reverse=True)
    return [
        {
            'position': idx + 1,
            'playerId': p.id,
            'name': p.name,
            'wpm': p.wpm,
            'accuracy': p.accuracy,
            'progress': p.progress,
            'finished': p.finished,
        }
        for idx, p in enumerate(ordered)
    ]


def evaluate(room: Room, rule: CompletionRule) -> Optional[List[dict]]:
    """Return the final ranking if the race in `room` has ended, else None.

    - first-to-finish: ends once any player reached the end of the text;
      everyone present is ranked
    - all-finish: ends once every current member finished; finishers ranked
    Rooms that are not ACTIVE never produce a ranking, so a race that was
    already decided is not decided again.
    """
    if room.state != RoomState.ACTIVE or not room.players:
        return None
    players = list(room.players.values())
    text_length = len(room.text)

    if rule == CompletionRule.FIRST_TO_FINISH:
        if any(p.finished or p.progress >= text_length for p in players):
            return rank_players(players)
        return None

    if all(p.finished for p in players):
        return rank_players([p for p in players if p.finished])
    return None
