from flask import Blueprint, jsonify
from cardroom import get_router
from cardroom.services.game import RoomNotFound

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the card room server!'})

@main.route('/api/rooms')
def list_rooms():
    return jsonify({'rooms': get_router().snapshot()})

@main.route('/api/rooms/<string:room_id>')
def get_room(room_id):
    # Public view only: hand sizes, never the cards in them
    try:
        summary = get_router().snapshot(room_id)
    except RoomNotFound:
        return jsonify({'error': 'Room not found'}), 404
    return jsonify(summary)
