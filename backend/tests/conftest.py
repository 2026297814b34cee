import json
import os
import random
import sys
from collections import defaultdict

import pytest

# Ensure the backend root (containing the `cardroom` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from cardroom import create_app, socketio
from cardroom.services.game import Broadcaster, ConnectionDirectory, MessageRouter, RoomRegistry


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SOCKETIO_NAMESPACE = '/ws'
    CORS_ALLOWED_ORIGINS = ['http://localhost:5173']
    LOG_LEVEL = 'DEBUG'
    SHUFFLE_SEED = 1234


class ScriptedRandom:
    """A ``randrange`` source that replays a fixed script.

    Once the script runs out it answers ``n - 1``, which leaves a
    Fisher-Yates shuffle as the identity permutation.
    """

    def __init__(self, values=()):
        self.values = list(values)
        self.calls = []

    def randrange(self, n):
        self.calls.append(n)
        if self.values:
            value = self.values.pop(0)
            assert 0 <= value < n
            return value
        return n - 1


def unshuffled_deal(starter_index):
    """Script for one deal: identity shuffle, then pick ``starter_index``."""
    return ScriptedRandom([i for i in range(51, 0, -1)] + [starter_index])


class Harness:
    """A MessageRouter wired to in-memory connections that record what they receive."""

    def __init__(self, rng=None):
        self.registry = RoomRegistry(rng=rng or random.Random(7))
        self.directory = ConnectionDirectory()
        self.router = MessageRouter(self.registry, Broadcaster(self.directory))
        self.inbox = defaultdict(list)

    def connect(self, *connection_ids):
        for conn in connection_ids:
            self.router.connect(conn, self._recorder(conn))

    def _recorder(self, conn):
        def _send(text):
            self.inbox[conn].append(json.loads(text))
        return _send

    def send(self, conn, message_type, **payload):
        self.router.handle(conn, json.dumps({'type': message_type, 'payload': payload}))

    def received(self, conn, message_type=None):
        """Take what ``conn`` received: everything, or only ``message_type``."""
        messages = self.inbox[conn]
        if message_type is None:
            self.inbox[conn] = []
            return messages
        self.inbox[conn] = [m for m in messages if m['type'] != message_type]
        return [m for m in messages if m['type'] == message_type]

    def join_pair(self, room='r1'):
        """Connect A and B and seat them in ``room``. Returns their player ids."""
        self.connect('A', 'B')
        self.send('A', 'join', room=room, nick='Alice', create=True)
        self.send('B', 'join', room=room, nick='Bob')
        a_id = self.received('A', 'joined')[0]['payload']['id']
        b_id = self.received('B', 'joined')[0]['payload']['id']
        return a_id, b_id


@pytest.fixture()
def harness():
    return Harness()


@pytest.fixture()
def make_harness():
    return Harness


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_factory(flask_app):
    clients = []

    def _make():
        test_client = socketio.test_client(
            flask_app,
            flask_test_client=flask_app.test_client(),
            namespace='/ws'
        )
        clients.append(test_client)
        return test_client

    yield _make
    for test_client in clients:
        try:
            if test_client.is_connected('/ws'):
                test_client.disconnect(namespace='/ws')
        except Exception:
            pass


@pytest.fixture()
def sio_client(sio_factory):
    return sio_factory()


@pytest.fixture()
def scripted_rng():
    return ScriptedRandom


@pytest.fixture()
def unshuffled():
    return unshuffled_deal
