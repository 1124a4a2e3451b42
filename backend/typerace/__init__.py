from functools import partial

from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO, join_room, leave_room
import click
from config import Config

socketio = SocketIO(async_mode=None)

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    allowed_origins = flask_app.config.get('CORS_ORIGINS') or []
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # One gateway + registry per app, reached by the socket handlers through current_app
    from typerace.gateway import SessionGateway
    namespace = flask_app.config.get('SOCKETIO_NAMESPACE', '/')
    flask_app.extensions['typerace'] = SessionGateway.from_config(
        flask_app.config,
        emit=partial(socketio.emit, namespace=namespace),
        enter=lambda sid, room: join_room(room, sid=sid, namespace=namespace),
        leave=lambda sid, room: leave_room(room, sid=sid, namespace=namespace),
        logger=flask_app.logger,
    )

    # Import and register blueprints here
    from typerace.routes import main
    flask_app.register_blueprint(main)

    from typerace.api.rooms import rooms
    flask_app.register_blueprint(rooms, url_prefix='/api/rooms')

    from typerace.socketio_events import register_socketio_handlers
    register_socketio_handlers(namespace)

    @click.command('passages')
    def passages_command():
        """Lists the passages races are drawn from."""
        from typerace.passages import SAMPLE_PASSAGES
        for idx, text in enumerate(SAMPLE_PASSAGES, start=1):
            click.echo(f'{idx}. ({len(text)} chars) {text}')

    flask_app.cli.add_command(passages_command)

    return flask_app
