import os
import random
import sys
import pytest

# Ensure the backend root (containing the `gomoku` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from gomoku import create_app, get_registry, socketio
from gomoku.services.games.registry import RoomRegistry
from gomoku.services.games.room import Room


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    CORS_ALLOWED_ORIGINS = '*'
    TURN_DURATION_SEC = 60
    TIMER_HEARTBEAT_SEC = 0
    LOG_LEVEL = 'DEBUG'


class LiveTimerConfig(TestConfig):
    # Countdowns run as real background tasks with short turns
    ENABLE_TIMER_IN_TESTS = True
    TURN_DURATION_SEC = 2


class RecordingPublisher:
    """Collects outbound events instead of sending them."""

    def __init__(self):
        self.events = []
        self.groups = {}

    def emit(self, event, data=None, to=None):
        self.events.append((event, data, to))

    def enter_room(self, sid, room):
        self.groups.setdefault(room, set()).add(sid)

    def leave_room(self, sid, room):
        self.groups.get(room, set()).discard(sid)

    def named(self, event):
        return [e for e in self.events if e[0] == event]

    def names(self):
        return [e[0] for e in self.events]

    def clear(self):
        self.events.clear()


@pytest.fixture()
def publisher():
    return RecordingPublisher()


@pytest.fixture()
def rng():
    return random.Random(1234)


@pytest.fixture()
def room(publisher, rng):
    return Room('room-1', publisher, rng=rng, created_at=1000)


@pytest.fixture()
def playing_room(room, publisher):
    room.join('sid-a')
    room.join('sid-b')
    publisher.clear()
    return room


@pytest.fixture()
def registry(publisher, rng):
    return RoomRegistry(publisher, rng=rng, clock=lambda: 1.5)


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def rooms(flask_app):
    return get_registry(flask_app)


@pytest.fixture()
def live_flask_app():
    application = create_app(LiveTimerConfig)
    with application.app_context():
        yield application


def _sio_clients(application):
    created = []

    def _make(query_string=None):
        test_client = socketio.test_client(
            application,
            flask_test_client=application.test_client(),
            query_string=query_string,
        )
        created.append(test_client)
        return test_client

    yield _make
    for test_client in created:
        if test_client.is_connected():
            test_client.disconnect()


@pytest.fixture()
def make_sio_client(flask_app):
    yield from _sio_clients(flask_app)


@pytest.fixture()
def make_live_sio_client(live_flask_app):
    yield from _sio_clients(live_flask_app)
