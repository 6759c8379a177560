from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .cards import Card


class EventKind(str, Enum):
    PLAY = 'play'
    DRAW = 'draw'
    SKIP = 'skip'
    REVERSE = 'reverse'
    DRAW_TWO = 'draw2'
    WILD_DRAW_FOUR = 'draw4'
    UNO_CALLED = 'uno'
    UNO_PENALTY = 'unoPenalty'
    GAME_OVER = 'gameOver'
    JOINED = 'joined'
    LEFT = 'left'
    SHUFFLED = 'shuffle'


@dataclass(frozen=True)
class Event:
    """Last thing that happened in a room.

    ``card`` is only set for cards played face up; draws never carry one.
    """

    kind: EventKind
    actor: Optional[str] = None
    target: Optional[str] = None
    count: int = 0
    card: Optional[Card] = None

    def to_dict(self):
        return {
            'type': self.kind.value,
            'by': self.actor,
            'target': self.target,
            'count': self.count,
            'card': self.card.to_dict() if self.card else None,
        }
