"""Per-seat views of a room.

A view shows the seat its own hand and only the card counts of everyone
else. Each view is a full snapshot; nothing is diffed.
"""

from typing import Any, Dict, List, Tuple

from .room import Room, RoomStatus


def build_view(room: Room, identity: str) -> Dict[str, Any]:
    me = room.players[identity]
    opponent = room.opponent_of(identity)
    top = room.top_card
    return {
        'code': room.code,
        'version': room.version,
        'status': room.status.value,
        'you': identity,
        'your_hand': [card.to_dict() for card in me.hand],
        'has_declared_uno': me.has_declared_uno,
        'players': [
            {
                'username': room.players[i].identity,
                'cards': len(room.players[i].hand),
                'connected': room.players[i].connected,
            }
            for i in room.seats
        ],
        'opponent': {
            'username': opponent.identity,
            'cards': len(opponent.hand),
            'connected': opponent.connected,
        } if opponent else None,
        'top_card': top.to_dict() if top else None,
        'draw_pile': len(room.deck),
        'current_color': room.current_color.value if room.current_color else None,
        'current_player': room.current_identity if room.status is RoomStatus.PLAYING else None,
        'turn_has_drawn': room.turn_has_drawn,
        'winner': room.winner,
        'last_event': room.last_event.to_dict() if room.last_event else None,
    }


def snapshots(room: Room) -> List[Tuple[str, Dict[str, Any]]]:
    """One (connection handle, view) pair per connected seat."""
    return [(p.handle, build_view(room, p.identity)) for p in room.connected_players()]
