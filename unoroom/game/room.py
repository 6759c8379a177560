"""Room state: two seats, the deck, turn pointer and color context.

A Room is plain data plus seat bookkeeping. Rule changes go through
``unoroom.game.rules``; locking and timers belong to the room manager.
"""

import random
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .cards import Card, Color, Deck
from .errors import NotInRoom
from .events import Event

MAX_SEATS = 2


class RoomStatus(str, Enum):
    WAITING = 'waiting'
    PLAYING = 'playing'
    FINISHED = 'finished'


@dataclass
class Player:
    identity: str
    handle: Optional[str] = None
    hand: List[Card] = field(default_factory=list)
    has_declared_uno: bool = False
    # Cancellable grace timer while the seat is disconnected
    grace_timer: Any = None

    @property
    def connected(self) -> bool:
        return self.handle is not None

    def find_card(self, instance_id: str) -> Optional[Card]:
        for card in self.hand:
            if card.instance_id == instance_id:
                return card
        return None

    def take_card(self, instance_id: str) -> Card:
        card = self.find_card(instance_id)
        self.hand.remove(card)
        self.has_declared_uno = False
        return card

    def give(self, card: Card) -> None:
        self.hand.append(card)
        self.has_declared_uno = False


class Room:
    def __init__(self, code: str, rng: Optional[random.Random] = None, replenish: bool = True):
        self.code = code
        self.status = RoomStatus.WAITING
        self.players: Dict[str, Player] = {}
        # Seat order; turn_index points into it
        self.seats: List[str] = []
        self.deck = Deck(rng=rng, replenish=replenish)
        self.current_color: Optional[Color] = None
        self.turn_index = 0
        self.turn_has_drawn = False
        self.last_event: Optional[Event] = None
        self.winner: Optional[str] = None
        self.closed = False
        self.lock = threading.RLock()
        # Bumped for every snapshot; clients drop views older than the last one seen
        self.version = 0
        # Outbound batches leave in ticket order, outside the game lock
        self.send_turn = threading.Condition()
        self.next_ticket = 0
        self.now_serving = 0

    def take_ticket(self) -> int:
        ticket = self.next_ticket
        self.next_ticket += 1
        return ticket

    def __repr__(self):
        return f"<Room {self.code} {self.status.value} seats={self.seats}>"

    @property
    def discard(self) -> List[Card]:
        return self.deck.discard

    @property
    def top_card(self) -> Optional[Card]:
        return self.deck.top

    @property
    def is_full(self) -> bool:
        return len(self.seats) >= MAX_SEATS

    @property
    def is_empty(self) -> bool:
        return not self.seats

    @property
    def current_identity(self) -> Optional[str]:
        if not self.seats:
            return None
        return self.seats[self.turn_index]

    def connected_players(self) -> List[Player]:
        return [self.players[i] for i in self.seats if self.players[i].connected]

    def player(self, identity: str) -> Player:
        player = self.players.get(identity)
        if player is None:
            raise NotInRoom()
        return player

    def opponent_of(self, identity: str) -> Optional[Player]:
        for other in self.seats:
            if other != identity:
                return self.players[other]
        return None

    def seat(self, identity: str, handle: Optional[str]) -> Player:
        player = Player(identity=identity, handle=handle)
        self.players[identity] = player
        self.seats.append(identity)
        return player

    def unseat(self, identity: str) -> Player:
        """Remove a seat for good; its cards go back under the draw pile."""
        player = self.players.pop(identity)
        idx = self.seats.index(identity)
        self.seats.remove(identity)
        if idx < self.turn_index:
            self.turn_index -= 1
        elif self.turn_index >= len(self.seats):
            self.turn_index = 0
        self.deck.cards[0:0] = player.hand
        player.hand = []
        return player

    def card_total(self) -> int:
        return len(self.deck.cards) + len(self.deck.discard) + sum(
            len(p.hand) for p in self.players.values()
        )
