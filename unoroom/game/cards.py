"""Cards, the 108-card deck, and the draw pile with its discard."""

import random
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from .errors import DeckExhaustedUnrecoverable

DECK_SIZE = 108


class Color(str, Enum):
    RED = 'R'
    GREEN = 'G'
    BLUE = 'B'
    YELLOW = 'Y'

    @classmethod
    def parse(cls, raw) -> Optional['Color']:
        """Accept either the wire letter ('R') or the name ('red')."""
        if not isinstance(raw, str):
            return None
        text = raw.strip().upper()
        for color in cls:
            if text in (color.value, color.name):
                return color
        return None


class Kind(str, Enum):
    NUMBER = 'number'
    SKIP = 'skip'
    REVERSE = 'reverse'
    DRAW_TWO = 'draw2'
    WILD = 'wild'
    WILD_DRAW_FOUR = 'wild4'

    @property
    def is_wild(self) -> bool:
        return self in (Kind.WILD, Kind.WILD_DRAW_FOUR)


_FACE_LABELS = {
    Kind.SKIP: 'SKIP',
    Kind.REVERSE: 'REV',
    Kind.DRAW_TWO: 'D2',
    Kind.WILD: 'W',
    Kind.WILD_DRAW_FOUR: 'D4',
}


@dataclass(frozen=True)
class Card:
    """One physical card.

    ``face`` identifies what is printed on the card and repeats across the
    deck; ``instance_id`` is unique per physical card for the process lifetime.
    """

    kind: Kind
    color: Optional[Color] = None
    value: Optional[int] = None
    instance_id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def __post_init__(self) -> None:
        if self.kind.is_wild and self.color is not None:
            raise ValueError('Wild cards carry no color')
        if not self.kind.is_wild and self.color is None:
            raise ValueError(f'{self.kind.value} cards need a color')
        if self.kind is Kind.NUMBER and (self.value is None or not 0 <= self.value <= 9):
            raise ValueError(f'Invalid number value: {self.value}')

    @property
    def face(self) -> str:
        label = str(self.value) if self.kind is Kind.NUMBER else _FACE_LABELS[self.kind]
        return f"{self.color.value}{label}" if self.color else label

    def to_dict(self):
        return {
            'id': self.instance_id,
            'face': self.face,
            'kind': self.kind.value,
            'color': self.color.value if self.color else None,
            'value': self.value,
        }

    def __str__(self) -> str:
        return self.face


def build_deck() -> List[Card]:
    """Create the standard 108-card set with fresh instance ids.

    Per color: one 0, two each of 1-9, two each of Skip/Reverse/Draw Two.
    Plus four Wild and four Wild Draw Four.
    """
    cards: List[Card] = []
    for color in Color:
        cards.append(Card(Kind.NUMBER, color, 0))
        for value in range(1, 10):
            cards.append(Card(Kind.NUMBER, color, value))
            cards.append(Card(Kind.NUMBER, color, value))
        for kind in (Kind.SKIP, Kind.REVERSE, Kind.DRAW_TWO):
            cards.append(Card(kind, color))
            cards.append(Card(kind, color))
    for _ in range(4):
        cards.append(Card(Kind.WILD))
        cards.append(Card(Kind.WILD_DRAW_FOUR))
    return cards


class Deck:
    """Draw pile plus discard pile for a single room.

    The top of the draw pile is the end of ``cards``; the discard top is the
    end of ``discard``. ``minted`` counts every card this deck has created so
    the room can check that no card appeared or vanished.
    """

    def __init__(self, rng: Optional[random.Random] = None, replenish: bool = True):
        self.rng = rng or random.Random()
        self.replenish = replenish
        self.cards: List[Card] = []
        self.discard: List[Card] = []
        self.minted = 0
        self.reshuffles = 0

    def reset(self) -> None:
        self.cards = build_deck()
        self.discard = []
        self.minted = len(self.cards)
        self.shuffle()

    def shuffle(self) -> None:
        # random.shuffle is Fisher-Yates
        self.rng.shuffle(self.cards)

    @property
    def top(self) -> Optional[Card]:
        return self.discard[-1] if self.discard else None

    def __len__(self) -> int:
        return len(self.cards)

    def draw(self) -> Card:
        if not self.cards:
            self._recycle_discard()
        if not self.cards:
            raise DeckExhaustedUnrecoverable()
        return self.cards.pop()

    def _recycle_discard(self) -> None:
        if len(self.discard) > 1:
            top = self.discard.pop()
            self.cards = self.discard
            self.discard = [top]
            self.shuffle()
            self.reshuffles += 1
            return
        if not self.replenish:
            return
        fresh = build_deck()
        self.minted += len(fresh)
        self.cards = fresh
        self.shuffle()
        self.reshuffles += 1

    def reveal_opening(self) -> Card:
        """Turn the first discard face up, re-rolling until a number card shows."""
        card = self.draw()
        while card.kind is not Kind.NUMBER:
            self.cards.append(card)
            self.shuffle()
            card = self.draw()
        self.discard.append(card)
        return card
