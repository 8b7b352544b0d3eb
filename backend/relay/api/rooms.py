from flask import Blueprint, jsonify, current_app
from relay import get_registry
from relay.models import RoomIdExhausted

rooms = Blueprint('rooms', __name__)


@rooms.route('', methods=['GET'])
def list_rooms():
    """
    Lists every live room with its player count, for discovery.
    """
    return jsonify({'rooms': get_registry(current_app).list_rooms()}), 200


@rooms.route('', methods=['POST'])
def create_room():
    """
    Creates a new, empty room. Players join it over Socket.IO.
    """
    try:
        room = get_registry(current_app).create_room()
    except RoomIdExhausted as exc:
        current_app.logger.error(f"[create-failed] error={exc}")
        return jsonify({'error': 'No room ids available, try again later'}), 503
    return jsonify({
        'roomId': room.id,
        'room': room.to_dict()
    }), 201


@rooms.route('/<string:room_id>', methods=['GET'])
def get_room(room_id):
    """
    Returns one room's public summary. Resource vectors are not included.
    """
    room = get_registry(current_app).get_room(room_id)
    if not room:
        return jsonify({'error': 'Room not found'}), 404
    return jsonify({'room': room.to_dict()}), 200
