import functools
import logging
import math
import threading
from typing import Any, Callable, Dict, List, Optional

from typerace.errors import (
    DuplicateStart,
    InvalidPayload,
    NotEnoughPlayers,
    NotHost,
    RaceNotActive,
    RoomNotFound,
    UnknownPlayer,
)
from typerace.models import Room, RoomState
from typerace.passages import choose_passage as default_choose_passage
from typerace.registry import RoomRegistry
from typerace.services.race import (
    CompletionRule,
    StartPolicy,
    can_host_start,
    evaluate,
    should_auto_start,
)

# Failures the requesting connection hears about via room-error
_REPORTED = (RoomNotFound, InvalidPayload, NotHost, NotEnoughPlayers)
# Late or stray messages (left the room, race not running)
_IGNORED = (UnknownPlayer, RaceNotActive)


def room_channel(code: str) -> str:
    return f"race:{code}"


def _message_handler(method):
    """Run one inbound message to completion under the gateway lock."""

    @functools.wraps(method)
    def wrapper(self, sid, data=None):
        with self._lock:
            try:
                return method(self, sid, data)
            except _REPORTED as exc:
                self._reject(sid, exc)
            except DuplicateStart:
                self.logger.info(f"[duplicate-start] player={sid}")
            except _IGNORED as exc:
                self.logger.debug(f"[ignored] event={method.__name__} player={sid} reason={exc.message}")

    return wrapper


class SessionGateway:
    """Turns inbound socket events into room mutations and outbound emits.

    `emit(event, payload, to=..., skip_sid=...)` sends to one connection or
    to a Socket.IO room. `enter(sid, room)` / `leave(sid, room)` keep each
    race's Socket.IO room in step with the room's player map.
    """

    def __init__(
        self,
        registry: RoomRegistry,
        emit: Callable[..., Any],
        enter: Callable[[str, str], Any],
        leave: Callable[[str, str], Any],
        choose_passage: Callable[[], str] = default_choose_passage,
        min_players: int = 2,
        start_policy: StartPolicy = StartPolicy.AUTO,
        completion_rule: CompletionRule = CompletionRule.FIRST_TO_FINISH,
        max_name_length: int = 32,
        logger: Optional[logging.Logger] = None,
    ):
        self.registry = registry
        self.min_players = max(1, int(min_players))
        self.start_policy = StartPolicy(start_policy)
        self.completion_rule = CompletionRule(completion_rule)
        self.max_name_length = max_name_length
        self.logger = logger or logging.getLogger(__name__)
        self._emit = emit
        self._enter = enter
        self._leave = leave
        self._choose_passage = choose_passage
        self._lock = threading.RLock()

    @classmethod
    def from_config(cls, config, emit, enter, leave, logger=None, choose_passage=default_choose_passage):
        registry = RoomRegistry(code_length=int(config.get('ROOM_CODE_LENGTH', 6)))
        return cls(
            registry,
            emit,
            enter,
            leave,
            choose_passage=choose_passage,
            min_players=int(config.get('MIN_PLAYERS', 2)),
            start_policy=config.get('START_POLICY', StartPolicy.AUTO),
            completion_rule=config.get('COMPLETION_RULE', CompletionRule.FIRST_TO_FINISH),
            max_name_length=int(config.get('MAX_NAME_LENGTH', 32)),
            logger=logger,
        )

    # ---- outbound ----

    def _send(self, sid: str, event: str, payload) -> None:
        self._emit(event, payload, to=sid)

    def _broadcast(self, room: Room, event: str, payload, skip_sid: Optional[str] = None) -> None:
        self._emit(event, payload, to=room_channel(room.code), skip_sid=skip_sid)

    def _broadcast_players(self, room: Room) -> None:
        self._broadcast(room, 'players-update', room.players_payload())

    def _reject(self, sid: str, exc) -> None:
        self.logger.info(f"[room-error] player={sid} message={exc.message}")
        self._send(sid, 'room-error', {'message': exc.message})

    # ---- payload parsing ----

    @staticmethod
    def _payload(data) -> Dict[str, Any]:
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise InvalidPayload()
        return data

    def _player_name(self, data) -> str:
        name = data.get('playerName')
        if not isinstance(name, str) or not name.strip():
            raise InvalidPayload('Player name is required')
        return name.strip()[: self.max_name_length]

    @staticmethod
    def _number(data, key: str, default=None) -> float:
        value = data.get(key, default)
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
            raise InvalidPayload(f'{key} must be a number')
        return max(0, value)

    def _membership(self, sid: str) -> Room:
        # Always the server-side membership, never a code sent by the client
        room = self.registry.room_of(sid)
        if room is None:
            raise UnknownPlayer(sid)
        return room

    # ---- lifecycle helpers ----

    def _start(self, room: Room) -> None:
        room.start_race(self._choose_passage())
        self.logger.info(f"[race-start] code={room.code} players={len(room.players)}")
        self._broadcast(room, 'game-start', {'text': room.text})

    def _maybe_auto_start(self, room: Room) -> None:
        if self.start_policy == StartPolicy.AUTO and should_auto_start(room, self.min_players):
            self._start(room)

    def _evaluate(self, room: Room) -> None:
        ranking = evaluate(room, self.completion_rule)
        if ranking is None:
            return
        if room.complete(ranking):
            winner = ranking[0]['playerId'] if ranking else None
            self.logger.info(f"[race-end] code={room.code} rule={self.completion_rule.value} winner={winner}")
            self._broadcast(room, 'game-end', ranking)

    def _remove(self, sid: str, room: Room) -> None:
        code = room.code
        survivor = self.registry.remove_player(code, sid)
        self._leave(sid, room_channel(code))
        if survivor is None:
            self.logger.info(f"[room-closed] code={code}")
            return
        self.logger.info(f"[player-left] code={code} player={sid} remaining={len(survivor.players)}")
        self._broadcast_players(survivor)
        self._evaluate(survivor)

    def _leave_current(self, sid: str) -> None:
        for room in self.registry.rooms_for(sid):
            self._remove(sid, room)

    # ---- inbound ----

    def connect(self, sid: str) -> None:
        self._send(sid, 'connected', {'playerId': sid})

    @_message_handler
    def create_room(self, sid, data=None):
        data = self._payload(data)
        name = self._player_name(data)
        self._leave_current(sid)
        room = self.registry.create_room(sid, name)
        self._enter(sid, room_channel(room.code))
        self.logger.info(f"[room-created] code={room.code} player={sid}")
        self._send(sid, 'room-created', {'roomCode': room.code, 'playerId': sid})
        self._broadcast_players(room)
        self._maybe_auto_start(room)

    @_message_handler
    def join_room(self, sid, data=None):
        data = self._payload(data)
        code = data.get('roomCode')
        if not isinstance(code, str) or not code.strip():
            raise InvalidPayload('Room code is required')
        name = self._player_name(data)
        room = self.registry.get_room(code)
        if sid in room.players:
            self._send(sid, 'room-joined', {'roomCode': room.code, 'playerId': sid})
            return
        self._leave_current(sid)
        room = self.registry.join_room(room.code, sid, name)
        self._enter(sid, room_channel(room.code))
        self.logger.info(f"[room-joined] code={room.code} player={sid} players={len(room.players)}")
        self._send(sid, 'room-joined', {'roomCode': room.code, 'playerId': sid})
        self._broadcast_players(room)
        if room.state == RoomState.ACTIVE:
            self._send(sid, 'game-start', {'text': room.text})
        else:
            self._maybe_auto_start(room)

    @_message_handler
    def start_race(self, sid, data=None):
        room = self._membership(sid)
        if self.start_policy != StartPolicy.HOST:
            raise InvalidPayload('This room starts automatically')
        can_host_start(room, sid, self.min_players)
        self._start(room)

    @_message_handler
    def player_progress(self, sid, data=None):
        room = self._membership(sid)
        data = self._payload(data)
        progress = self._number(data, 'progress')
        wpm = self._number(data, 'wpm', default=0)
        was_finished = room.players[sid].finished
        player = room.record_progress(sid, int(progress), wpm)
        if was_finished:
            return
        self._broadcast(
            room,
            'player-progress',
            {'playerId': sid, 'progress': player.progress, 'wpm': player.wpm},
            skip_sid=sid,
        )
        self._evaluate(room)

    @_message_handler
    def finish(self, sid, data=None):
        room = self._membership(sid)
        data = self._payload(data)
        wpm = self._number(data, 'wpm', default=0)
        accuracy = min(100, self._number(data, 'accuracy', default=0))
        player = room.mark_finished(sid, wpm, accuracy)
        self._broadcast(
            room,
            'player-finished',
            {'playerId': sid, 'wpm': player.wpm, 'accuracy': player.accuracy},
            skip_sid=sid,
        )
        self._evaluate(room)

    @_message_handler
    def leave_room(self, sid, data=None):
        room = self._membership(sid)
        code = room.code
        self._remove(sid, room)
        self._send(sid, 'room-left', {'roomCode': code})

    @_message_handler
    def disconnect(self, sid, data=None):
        self._leave_current(sid)

    # ---- read-only views ----

    def room_snapshot(self, code: str) -> dict:
        with self._lock:
            return self.registry.get_room(code).to_dict()

    def list_rooms(self) -> List[dict]:
        with self._lock:
            return [
                {'code': room.code, 'state': room.state.value, 'players': len(room.players)}
                for room in self.registry.rooms()
            ]
