from flask import Blueprint, current_app, jsonify

from liarsdice.schemas import RoomSnapshot, RoomSummary

rooms = Blueprint('rooms', __name__)


def _registry():
    return current_app.extensions['liarsdice'].registry


@rooms.route('', methods=['GET'])
def list_rooms():
    """
    Lists open rooms with their member counts and phase.
    """
    return jsonify([RoomSummary.of(r).to_wire() for r in _registry().rooms()]), 200


@rooms.route('/<string:name>/state', methods=['GET'])
def get_room_state(name):
    """
    Returns the public snapshot of a room. Dice stay hidden outside the reveal.
    """
    room = _registry().get(name)
    if room is None:
        return jsonify({'error': 'Room not found'}), 404
    with room.lock:
        snapshot = RoomSnapshot.of(room, reveal=room.phase == 'reveal')
    return jsonify(snapshot.to_wire()), 200
