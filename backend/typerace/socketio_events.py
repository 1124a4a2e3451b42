from flask import current_app, request
from flask_socketio import emit

from typerace import socketio


def _gateway():
    return current_app.extensions['typerace']


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def handle_connect(auth=None):
    _gateway().connect(_get_sid())


def handle_disconnect(reason=None):
    _gateway().disconnect(_get_sid())


def handle_create_room(data=None):
    _gateway().create_room(_get_sid(), data)


def handle_join_room(data=None):
    _gateway().join_room(_get_sid(), data)


def handle_start_race(data=None):
    _gateway().start_race(_get_sid(), data)


def handle_player_progress(data=None):
    _gateway().player_progress(_get_sid(), data)


def handle_finish(data=None):
    _gateway().finish(_get_sid(), data)


def handle_leave_room(data=None):
    _gateway().leave_room(_get_sid(), data)


def handle_ping(data=None):
    emit('pong', data or {})


_HANDLERS = (
    ('connect', handle_connect),
    ('disconnect', handle_disconnect),
    ('create-room', handle_create_room),
    ('join-room', handle_join_room),
    ('start-race', handle_start_race),
    ('player-progress', handle_player_progress),
    ('finish', handle_finish),
    ('leave-room', handle_leave_room),
    ('ping', handle_ping),
)


def register_socketio_handlers(namespace: str = '/') -> None:
    """Register Socket.IO event handlers on `namespace`.

    Handlers look up the gateway attached to the app serving the
    connection, so each app keeps its own gateway and registry. The Socket.IO
    server itself belongs to the module-level `socketio` and follows the
    most recent `init_app`.
    """
    for event, handler in _HANDLERS:
        socketio.on_event(event, handler, namespace=namespace)
