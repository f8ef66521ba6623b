import os
import sys
import pytest

# Ensure the backend root (containing the `duel` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from duel import create_app, socketio

NAMESPACE = '/ws'


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SOCKETIO_NAMESPACE = NAMESPACE
    CORS_ORIGINS = []
    LOG_LEVEL = 'DEBUG'
    SCHEDULER_MODE = 'manual'
    COUNTDOWN_DURATION_MS = 4000


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application
    application.extensions['room_registry'].close()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def registry(flask_app):
    return flask_app.extensions['room_registry']


@pytest.fixture()
def clock(registry):
    """The manual scheduler driving every countdown and projectile."""
    return registry.scheduler


class Player:
    """A connected Socket.IO test client plus its server-assigned id."""

    def __init__(self, test_client):
        self.sio = test_client
        self.inbox = []
        self.sid = self.first('yourId')['args'][0]

    def pull(self):
        self.inbox.extend(self.sio.get_received(NAMESPACE))
        return self.inbox

    def events(self, name):
        return [pkt for pkt in self.pull() if pkt['name'] == name]

    def first(self, name):
        found = self.events(name)
        assert found, f"no {name!r} received"
        return found[0]

    def last(self, name):
        found = self.events(name)
        assert found, f"no {name!r} received"
        return found[-1]

    def payloads(self, name):
        return [pkt['args'][0] if pkt['args'] else None for pkt in self.events(name)]

    def clear(self):
        self.pull()
        self.inbox = []

    def emit(self, event, payload=None):
        if payload is None:
            self.sio.emit(event, namespace=NAMESPACE)
        else:
            self.sio.emit(event, payload, namespace=NAMESPACE)

    def disconnect(self):
        self.sio.disconnect(namespace=NAMESPACE)


@pytest.fixture()
def connect(flask_app):
    """Factory connecting a new player to the match namespace."""
    players = []

    def _connect():
        player = Player(socketio.test_client(flask_app, namespace=NAMESPACE))
        players.append(player)
        return player

    yield _connect
    for player in players:
        if player.sio.is_connected(NAMESPACE):
            player.disconnect()


@pytest.fixture()
def duo(connect):
    """Two players sitting in room 'arena1', inboxes cleared."""
    a = connect()
    b = connect()
    a.emit('joinRoom', {'roomId': 'arena1'})
    b.emit('joinRoom', {'roomId': 'arena1'})
    a.clear()
    b.clear()
    return a, b


@pytest.fixture()
def active_duo(duo, clock):
    """Two players in 'arena1' with a round already ACTIVE."""
    a, b = duo
    a.emit('setReadyState', {'ready': True})
    b.emit('setReadyState', {'ready': True})
    clock.advance(4000)
    a.clear()
    b.clear()
    return a, b
