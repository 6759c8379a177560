from flask import current_app, request
from flask_socketio import ConnectionRefusedError, emit
from unoroom import socketio, room_manager
from unoroom.auth import authenticate
from unoroom.game.errors import GameError, Unauthorized
from unoroom.protocol import parse_action

NAMESPACE = '/ws'


def _get_sid() -> str:
    # request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def handle_connect(auth=None):
    token = (auth or {}).get('token') if isinstance(auth, dict) else None
    token = token or request.args.get('token')
    try:
        identity = authenticate(token)
    except Unauthorized as exc:
        current_app.logger.info(f"[auth-reject] sid={_get_sid()} reason={exc}")
        raise ConnectionRefusedError('unauthorized')
    room_manager.connect(_get_sid(), identity)
    emit('connected', {'username': identity})


def handle_disconnect(*args):
    room_manager.disconnect(_get_sid())


def _dispatch(event, data):
    """Parse and run one action; errors go back to this caller only."""
    try:
        action = parse_action(event, data)
        return room_manager.dispatch(_get_sid(), action)
    except GameError as exc:
        current_app.logger.info(f"[action-reject] sid={_get_sid()} event={event} error={exc.code}")
        return exc.to_ack()


def handle_create_room(data=None):
    return _dispatch('create_room', data)


def handle_join_room(data=None):
    return _dispatch('join_room', data)


def handle_reconnect_room(data=None):
    return _dispatch('reconnect_room', data)


def handle_play_card(data=None):
    return _dispatch('play_card', data)


def handle_draw_card(data=None):
    return _dispatch('draw_card', data)


def handle_call_uno(data=None):
    return _dispatch('call_uno', data)


def handle_leave_room(data=None):
    return _dispatch('leave_room', data)


def handle_ping(data=None):
    emit('pong', data or {})


def register_socketio_handlers() -> None:
    """Register Socket.IO event handlers on the '/ws' namespace."""
    socketio.on_event('connect', handle_connect, namespace=NAMESPACE)
    socketio.on_event('disconnect', handle_disconnect, namespace=NAMESPACE)
    socketio.on_event('create_room', handle_create_room, namespace=NAMESPACE)
    socketio.on_event('join_room', handle_join_room, namespace=NAMESPACE)
    socketio.on_event('reconnect_room', handle_reconnect_room, namespace=NAMESPACE)
    socketio.on_event('play_card', handle_play_card, namespace=NAMESPACE)
    socketio.on_event('draw_card', handle_draw_card, namespace=NAMESPACE)
    socketio.on_event('call_uno', handle_call_uno, namespace=NAMESPACE)
    socketio.on_event('leave_room', handle_leave_room, namespace=NAMESPACE)
    socketio.on_event('ping', handle_ping, namespace=NAMESPACE)
