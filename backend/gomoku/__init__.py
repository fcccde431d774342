from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from config import Config

from gomoku.publisher import SocketIOPublisher
from gomoku.services.games.registry import RoomRegistry

socketio = SocketIO(async_mode=None)

REGISTRY_KEY = 'gomoku_rooms'


def _allowed_origins(value):
    origins = [o.strip() for o in (value or '*').split(',') if o.strip()]
    return '*' if origins in ([], ['*']) else origins


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    allowed_origins = _allowed_origins(flask_app.config.get('CORS_ALLOWED_ORIGINS'))
    CORS(flask_app, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # Countdowns run as Socket.IO background tasks, except in tests where
    # they are driven by calling tick() directly
    timers_enabled = not flask_app.config.get('TESTING') or flask_app.config.get('ENABLE_TIMER_IN_TESTS')
    flask_app.extensions[REGISTRY_KEY] = RoomRegistry(
        SocketIOPublisher(socketio),
        turn_duration=int(flask_app.config.get('TURN_DURATION_SEC', 60)),
        start_task=socketio.start_background_task if timers_enabled else None,
        sleep=socketio.sleep,
        heartbeat_sec=int(flask_app.config.get('TIMER_HEARTBEAT_SEC', 0)),
    )

    from gomoku.main import main
    flask_app.register_blueprint(main)

    # Register Socket.IO event handlers
    from gomoku.socketio_events import register_socketio_handlers
    register_socketio_handlers()

    return flask_app


def get_registry(flask_app=None) -> RoomRegistry:
    from flask import current_app
    return (flask_app or current_app).extensions[REGISTRY_KEY]
