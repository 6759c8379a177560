"""Card legality, play/draw/UNO actions, and win detection.

Every action validates fully before touching the room, so a rejected action
leaves the room exactly as it was.
"""

from typing import Optional

from .cards import Card, Color, Kind
from .errors import (
    AlreadyDrawn,
    CardCountMismatch,
    CardNotFound,
    ColorRequired,
    GameNotActive,
    IllegalCard,
    NotYourTurn,
)
from .events import Event, EventKind
from .room import Player, Room, RoomStatus

HAND_SIZE = 7
UNO_PENALTY_CARDS = 2

# Kinds after which the acting player goes again; with two seats, Reverse
# and Skip both skip the opponent.
_KEEP_TURN = {
    Kind.SKIP: (EventKind.SKIP, 0),
    Kind.REVERSE: (EventKind.REVERSE, 0),
    Kind.DRAW_TWO: (EventKind.DRAW_TWO, 2),
    Kind.WILD_DRAW_FOUR: (EventKind.WILD_DRAW_FOUR, 4),
}


def can_play(card: Card, room: Room) -> bool:
    top = room.top_card
    if top is None:
        return True
    if card.kind.is_wild:
        return True
    if card.color == room.current_color:
        return True
    if top.kind is Kind.NUMBER:
        return card.kind is Kind.NUMBER and card.value == top.value
    return card.kind is top.kind


def has_playable_card(player: Player, room: Room) -> bool:
    return any(can_play(card, room) for card in player.hand)


def start_game(room: Room, hand_size: int = HAND_SIZE) -> Card:
    """Shuffle a fresh deck, deal, and reveal the opening number card."""
    room.deck.reset()
    for identity in room.seats:
        room.players[identity].hand = []
        room.players[identity].has_declared_uno = False
    for _ in range(hand_size):
        for identity in room.seats:
            room.players[identity].hand.append(room.deck.draw())
    opening = room.deck.reveal_opening()
    room.current_color = opening.color
    room.turn_index = 0
    room.turn_has_drawn = False
    room.winner = None
    room.status = RoomStatus.PLAYING
    room.last_event = Event(EventKind.SHUFFLED)
    return opening


def finish(room: Room, winner: str, loser: Optional[str] = None) -> None:
    room.status = RoomStatus.FINISHED
    room.winner = winner
    room.turn_has_drawn = False
    room.last_event = Event(EventKind.GAME_OVER, actor=winner, target=loser)


def _require_turn(room: Room, identity: str) -> Player:
    player = room.player(identity)
    if room.status is not RoomStatus.PLAYING:
        raise GameNotActive()
    if room.current_identity != identity:
        raise NotYourTurn()
    return player


def _advance_turn(room: Room) -> None:
    room.turn_index = (room.turn_index + 1) % len(room.seats)
    room.turn_has_drawn = False


def _deal(room: Room, player: Player, count: int) -> None:
    for _ in range(count):
        player.give(room.deck.draw())


def play_card(room: Room, identity: str, instance_id: str, chosen_color: Optional[Color] = None) -> Event:
    player = _require_turn(room, identity)
    card = player.find_card(instance_id)
    if card is None:
        raise CardNotFound()
    if not can_play(card, room):
        raise IllegalCard()
    if card.kind.is_wild and not isinstance(chosen_color, Color):
        raise ColorRequired()

    declared = player.has_declared_uno
    player.take_card(instance_id)
    room.discard.append(card)
    room.current_color = chosen_color if card.kind.is_wild else card.color
    room.turn_has_drawn = False

    if not player.hand:
        finish(room, identity)
        return room.last_event

    opponent = room.opponent_of(identity)
    keep_turn = _KEEP_TURN.get(card.kind)
    if keep_turn:
        kind, draw_count = keep_turn
        if draw_count:
            _deal(room, opponent, draw_count)
        room.last_event = Event(kind, actor=identity, target=opponent.identity, count=draw_count, card=card)
    else:
        room.last_event = Event(EventKind.PLAY, actor=identity, card=card)

    if len(player.hand) == 1 and not declared:
        _deal(room, player, UNO_PENALTY_CARDS)
        room.last_event = Event(EventKind.UNO_PENALTY, actor=identity, count=UNO_PENALTY_CARDS, card=card)

    if not keep_turn:
        _advance_turn(room)
    return room.last_event


def draw_card(room: Room, identity: str) -> Card:
    """Draw one card; pass the turn when nothing in hand can be played."""
    player = _require_turn(room, identity)
    if room.turn_has_drawn:
        raise AlreadyDrawn()
    card = room.deck.draw()
    player.give(card)
    room.turn_has_drawn = True
    room.last_event = Event(EventKind.DRAW, actor=identity, count=1)
    if not has_playable_card(player, room):
        _advance_turn(room)
    return card


def call_uno(room: Room, identity: str) -> bool:
    """Declare UNO. Ignored unless the caller holds one or two cards."""
    player = room.player(identity)
    if room.status is not RoomStatus.PLAYING or len(player.hand) > 2:
        return False
    player.has_declared_uno = True
    room.last_event = Event(EventKind.UNO_CALLED, actor=identity)
    return True


def verify_card_count(room: Room) -> None:
    total = room.card_total()
    if total != room.deck.minted:
        raise CardCountMismatch(f"Room {room.code} holds {total} cards, expected {room.deck.minted}")
