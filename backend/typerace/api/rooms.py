from flask import Blueprint, current_app, jsonify

from typerace.errors import RoomNotFound

rooms = Blueprint('rooms', __name__)


def _gateway():
    return current_app.extensions['typerace']


@rooms.route('', methods=['GET'])
def list_rooms():
    """
    Lists live rooms with their state and head count.
    """
    return jsonify(_gateway().list_rooms()), 200


@rooms.route('/<string:room_code>', methods=['GET'])
def get_room(room_code):
    """
    Returns a snapshot of one room: players, state, passage and final ranking.
    """
    try:
        snapshot = _gateway().room_snapshot(room_code)
    except RoomNotFound as exc:
        return jsonify({'error': exc.message}), 404
    return jsonify(snapshot), 200
