import os
import random
import sys
import pytest

# Ensure the project root (containing the `unoroom` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from unoroom import create_app, db, socketio
from unoroom.game.cards import Card, Color, Kind
from unoroom.game.room import Room
from unoroom.services.rooms import RoomManager


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    DISCONNECT_GRACE_SEC = 30
    ROOM_CODE_LENGTH = 5
    HAND_SIZE = 7
    TOKEN_MAX_AGE_SEC = 3600
    LEADERBOARD_LIMIT = 25
    REPLENISH_EXHAUSTED_DECK = True
    CORS_ORIGINS = ['http://localhost:5173']


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        import unoroom.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def register(client):
    """Register a user over HTTP and return its bearer token."""
    def _register(username, password='secret'):
        res = client.post('/api/register', json={'username': username, 'password': password})
        assert res.status_code == 201, res.get_json()
        return res.get_json()['token']
    return _register


@pytest.fixture()
def sio_for(flask_app):
    """Open an authenticated Socket.IO test client on /ws."""
    opened = []

    def _connect(token):
        test_client = socketio.test_client(
            flask_app,
            namespace='/ws',
            auth={'token': token},
        )
        opened.append(test_client)
        return test_client

    yield _connect
    for test_client in opened:
        try:
            test_client.disconnect(namespace='/ws')
        except Exception:
            pass


class Outbox:
    """Records everything the room manager delivers."""

    def __init__(self):
        self.sent = []

    def __call__(self, handle, event, payload):
        self.sent.append((handle, event, payload))

    def states_for(self, handle):
        return [p for h, e, p in self.sent if h == handle and e == 'state']

    def last_state(self, handle):
        states = self.states_for(handle)
        return states[-1] if states else None

    def clear(self):
        self.sent = []


@pytest.fixture()
def outbox():
    return Outbox()


@pytest.fixture()
def winners():
    return []


@pytest.fixture()
def manager(outbox, winners):
    # No spawn: grace timers stay pending and tests fire them by hand
    mgr = RoomManager(
        grace_period=30,
        deliver=outbox,
        on_game_over=winners.append,
        rng=random.Random(1234),
    )
    mgr.connect('sid-alice', 'alice')
    mgr.connect('sid-bob', 'bob')
    return mgr


def number(color, value):
    return Card(Kind.NUMBER, color, value)


def action(kind, color=None):
    return Card(kind, color)


def make_room(hands, top, deck=None, turn='alice', rng_seed=7):
    """Build a PLAYING room with fixed hands, discard top and draw pile.

    The deck's mint count is set to whatever the room holds, so the card
    count check passes for hand-built rooms.
    """
    from unoroom.game.room import RoomStatus

    room = Room('TESTS', rng=random.Random(rng_seed))
    for identity, hand in hands.items():
        room.seat(identity, f'sid-{identity}')
        room.players[identity].hand = list(hand)
    room.deck.cards = list(deck) if deck is not None else [number(Color.YELLOW, v) for v in range(1, 10)]
    room.deck.discard = [top]
    room.deck.minted = room.card_total()
    room.current_color = top.color or Color.RED
    room.turn_index = room.seats.index(turn)
    room.status = RoomStatus.PLAYING
    return room
