import os
import sys
import pytest

# Ensure the backend root (containing the `typerace` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from typerace import create_app, socketio
from typerace.gateway import SessionGateway
from typerace.registry import RoomRegistry


NAMESPACE = '/ws'
PASSAGE = 'type me fast'


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    MIN_PLAYERS = 2
    START_POLICY = 'auto'
    COMPLETION_RULE = 'first-to-finish'
    ROOM_CODE_LENGTH = 6
    MAX_NAME_LENGTH = 32
    SOCKETIO_NAMESPACE = NAMESPACE
    CORS_ORIGINS = ['http://localhost:5173']
    LOG_LEVEL = 'DEBUG'


class Recorder:
    """Stands in for socketio.emit plus join_room/leave_room.

    Room emits are recorded once in `room_emits` and fanned out to the
    members of that room in `sent`, the way the Socket.IO server delivers.
    """

    def __init__(self):
        self.sent = []
        self.room_emits = []
        self.channels = {}  # room name -> list of sids

    def enter(self, sid, room):
        members = self.channels.setdefault(room, [])
        if sid not in members:
            members.append(sid)

    def leave(self, sid, room):
        members = self.channels.get(room, [])
        if sid in members:
            members.remove(sid)

    def __call__(self, event, payload, to=None, skip_sid=None):
        if to in self.channels:
            self.room_emits.append((to, event, payload, skip_sid))
            for sid in list(self.channels[to]):
                if sid != skip_sid:
                    self.sent.append((sid, event, payload))
        else:
            self.sent.append((to, event, payload))

    def events_for(self, sid, event=None):
        return [
            payload for to, name, payload in self.sent
            if to == sid and (event is None or name == event)
        ]

    def names_for(self, sid):
        return [name for to, name, _ in self.sent if to == sid]

    def count(self, event):
        return sum(1 for _, name, _ in self.sent if name == event)

    def clear(self):
        self.sent.clear()
        self.room_emits.clear()


def _codes(*codes):
    remaining = list(codes)

    def factory():
        return remaining.pop(0)

    return factory


@pytest.fixture()
def recorder():
    return Recorder()


@pytest.fixture()
def make_gateway(recorder):
    def _make(*codes, **kwargs):
        registry = RoomRegistry(code_factory=_codes(*codes) if codes else None)
        kwargs.setdefault('choose_passage', lambda: PASSAGE)
        return SessionGateway(registry, recorder, recorder.enter, recorder.leave, **kwargs)

    return _make


@pytest.fixture()
def gateway(make_gateway):
    return make_gateway('ABC123', 'DEF456', 'GHI789')


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace=NAMESPACE
    )
    yield test_client
    try:
        test_client.disconnect(namespace=NAMESPACE)
    except Exception:
        pass
