import os
import sys
import pytest

# Ensure the backend root (containing the `quizbuzz` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from quizbuzz import create_app, socketio
from quizbuzz.services.rooms import RoomRegistry


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    ALLOWED_ORIGINS = '*'
    LOG_LEVEL = 'DEBUG'
    RATE_LIMIT = 5
    # Timers are driven by hand in tests
    RATE_LIMIT_WINDOW_SEC = 0
    HEARTBEAT_INTERVAL_SEC = 0
    CLEANUP_INTERVAL_SEC = 0
    SOCKETIO_NAMESPACE = '/'


class RecordingBroadcaster:
    """Stands in for the Socket.IO fanout in domain tests."""

    def __init__(self):
        self.events = []
        self.closed = []
        self.rooms = {}

    def broadcast(self, room_code, event, payload):
        self.events.append((room_code, event, payload))

    def send(self, sid, event, payload):
        self.events.append((sid, event, payload))

    def enter_room(self, sid, room_code):
        self.rooms.setdefault(room_code, set()).add(sid)

    def leave_room(self, sid, room_code):
        self.rooms.get(room_code, set()).discard(sid)

    def close(self, sid):
        self.closed.append(sid)

    def named(self, event):
        return [e for e in self.events if e[1] == event]


@pytest.fixture()
def broadcaster():
    return RecordingBroadcaster()


@pytest.fixture()
def registry(broadcaster):
    return RoomRegistry(broadcaster)


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def services(flask_app):
    return flask_app.extensions['quizbuzz']


def connect_client(flask_app):
    """Open a Socket.IO test client and return it with its server-side sid."""
    test_client = socketio.test_client(flask_app, flask_test_client=flask_app.test_client())
    received = test_client.get_received()
    sid = next(pkt['args'][0]['sid'] for pkt in received if pkt['name'] == 'connected')
    return test_client, sid


@pytest.fixture()
def connect(flask_app):
    opened = []

    def _connect():
        test_client, sid = connect_client(flask_app)
        opened.append(test_client)
        return test_client, sid

    yield _connect
    for test_client in opened:
        if test_client.is_connected():
            test_client.disconnect()
