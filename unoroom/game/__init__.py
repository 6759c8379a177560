"""Two-seat UNO engine: cards, room state, rules and per-seat projection.

Pure Python with no Flask imports, so the room manager and tests can drive
it directly.
"""

from .cards import DECK_SIZE, Card, Color, Deck, Kind, build_deck
from .events import Event, EventKind
from .room import Player, Room, RoomStatus
from . import errors, projection, rules

__all__ = [
    'DECK_SIZE',
    'Card',
    'Color',
    'Deck',
    'Kind',
    'build_deck',
    'Event',
    'EventKind',
    'Player',
    'Room',
    'RoomStatus',
    'errors',
    'projection',
    'rules',
]
