import os
import sys
import pytest

# Ensure the project root (containing the `scrumpoker` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from scrumpoker import create_app, socketio
from scrumpoker.services.rooms import GameLogic, PlayerLifecycle, RoomStore


class FakeClock:
    """Manually advanced replacement for time.time()."""

    def __init__(self, start=1_700_000_000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    CORS_ALLOWED_ORIGINS = '*'
    SOCKETIO_NAMESPACE = '/'
    LOG_LEVEL = 'DEBUG'
    MAX_PLAYERS_PER_ROOM = 20
    RECONNECTION_GRACE_PERIOD_SEC = 30
    ROOM_CLEANUP_TIMEOUT_SEC = 30 * 60
    ROOM_CLEANUP_INTERVAL_SEC = 60
    REMOVAL_DISCONNECT_DELAY_MS = 100


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def store(clock):
    return RoomStore(clock=clock)


@pytest.fixture()
def lifecycle(store):
    return PlayerLifecycle(store, max_players=20)


@pytest.fixture()
def game(store):
    return GameLogic(store)


@pytest.fixture()
def flask_app(clock):
    application = create_app(TestConfig, clock=clock)
    with application.app_context():
        yield application


@pytest.fixture()
def services(flask_app):
    return flask_app.extensions['scrumpoker']


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_factory(flask_app):
    """Open Socket.IO test clients; all of them are closed at teardown."""
    opened = []

    def _connect():
        test_client = socketio.test_client(flask_app, flask_test_client=flask_app.test_client())
        opened.append(test_client)
        return test_client

    yield _connect
    for test_client in opened:
        try:
            if test_client.is_connected():
                test_client.disconnect()
        except Exception:
            pass


def received(sio_client, name=None):
    """Drain a test client's queue, optionally keeping only one event name."""
    events = sio_client.get_received()
    if name is None:
        return events
    return [e['args'][0] for e in events if e['name'] == name]


def join(sio_client, room_code, name, **extra):
    payload = {'roomCode': room_code, 'playerName': name}
    payload.update(extra)
    return sio_client.emit('join-room', payload, callback=True)
