"""Typed failures raised by the game engine and the room manager.

Each error carries a stable ``code`` that socket handlers hand back to the
caller in the acknowledgment; nothing here is ever broadcast to the other seat.
"""


class GameError(Exception):
    code = 'game_error'
    message = 'Game error'

    def __init__(self, message=None):
        super().__init__(message or self.message)

    def to_ack(self):
        return {'ok': False, 'error': self.code, 'message': str(self)}


class Unauthorized(GameError):
    code = 'unauthorized'
    message = 'Unauthorized'


class MalformedPayload(GameError):
    code = 'malformed_payload'
    message = 'Malformed payload'


class RoomNotFound(GameError):
    code = 'room_not_found'
    message = 'Room not found'


class RoomFull(GameError):
    code = 'room_full'
    message = 'Room is full'


class NotInRoom(GameError):
    code = 'not_in_room'
    message = 'Not in room'


class GameNotActive(GameError):
    code = 'game_not_active'
    message = 'Game not active'


class NotYourTurn(GameError):
    code = 'not_your_turn'
    message = 'Not your turn'


class CardNotFound(GameError):
    code = 'card_not_found'
    message = 'Card not found'


class IllegalCard(GameError):
    code = 'illegal_card'
    message = 'Card cannot be played'


class ColorRequired(GameError):
    code = 'color_required'
    message = 'Choose a color'


class AlreadyDrawn(GameError):
    code = 'already_drawn'
    message = 'You already drew this turn'


class InvariantViolation(GameError):
    """Internal corruption; the room cannot continue."""
    code = 'invariant_violation'
    message = 'Room state is inconsistent'


class DeckExhaustedUnrecoverable(InvariantViolation):
    code = 'deck_exhausted_unrecoverable'
    message = 'No cards left to draw'


class CardCountMismatch(InvariantViolation):
    code = 'card_count_mismatch'
    message = 'Card count mismatch'
