"""Inbound Socket.IO actions as typed variants.

``parse_action`` turns an event name and its raw payload into one of the
dataclasses below or raises ``MalformedPayload``; the room manager only ever
sees parsed actions.
"""

from dataclasses import dataclass
from typing import Any, Optional, Union

from unoroom.game.cards import Color
from unoroom.game.errors import MalformedPayload


@dataclass(frozen=True)
class CreateRoom:
    pass


@dataclass(frozen=True)
class JoinRoom:
    code: str


@dataclass(frozen=True)
class ReconnectRoom:
    code: str


@dataclass(frozen=True)
class PlayCard:
    code: str
    card_id: str
    chosen_color: Optional[Color] = None


@dataclass(frozen=True)
class DrawCard:
    code: str


@dataclass(frozen=True)
class CallUno:
    code: str


@dataclass(frozen=True)
class LeaveRoom:
    code: str


Action = Union[CreateRoom, JoinRoom, ReconnectRoom, PlayCard, DrawCard, CallUno, LeaveRoom]

EVENTS = {
    'create_room': CreateRoom,
    'join_room': JoinRoom,
    'reconnect_room': ReconnectRoom,
    'play_card': PlayCard,
    'draw_card': DrawCard,
    'call_uno': CallUno,
    'leave_room': LeaveRoom,
}


def normalize_code(raw: Any) -> str:
    if not isinstance(raw, str) or not raw.strip():
        raise MalformedPayload('code is required')
    return raw.strip().upper()


def _required_str(data: dict, key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value:
        raise MalformedPayload(f'{key} is required')
    return value


def parse_action(event: str, data: Any) -> Action:
    action_type = EVENTS.get(event)
    if action_type is None:
        raise MalformedPayload(f'Unknown event: {event}')
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise MalformedPayload('payload must be an object')

    if action_type is CreateRoom:
        return CreateRoom()
    code = normalize_code(data.get('code'))
    if action_type is PlayCard:
        card_id = _required_str(data, 'card_id')
        chosen_color = None
        raw_color = data.get('chosen_color')
        if raw_color is not None:
            chosen_color = Color.parse(raw_color)
            if chosen_color is None:
                raise MalformedPayload(f'Unknown color: {raw_color!r}')
        return PlayCard(code=code, card_id=card_id, chosen_color=chosen_color)
    return action_type(code=code)
