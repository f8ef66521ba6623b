from flask import Blueprint, current_app, jsonify

main = Blueprint('main', __name__)


@main.route('/')
def index():
    return jsonify({'message': 'Duel match server is running.'})


@main.route('/api/rooms')
def list_rooms():
    """Same payload as the roomList socket message, for pulling over HTTP."""
    registry = current_app.extensions['room_registry']
    return jsonify({'rooms': registry.list_rooms()})
