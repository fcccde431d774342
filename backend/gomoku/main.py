from flask import Blueprint, jsonify

from gomoku import get_registry

main = Blueprint('main', __name__)


@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the Gomoku game server!'})


@main.route('/health')
def health():
    return jsonify({'status': 'ok'})


@main.route('/api/rooms')
def list_rooms():
    """Same payload the lobby receives over Socket.IO as ``roomsUpdate``."""
    return jsonify(get_registry().listing())
