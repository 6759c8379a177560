"""Room lifecycle: create/join/reconnect/leave, grace timers and forfeits.

``RoomManager`` owns the process-wide registry of rooms. Every change to a
room happens under that room's lock; per-seat snapshots and leaderboard
requests go out after the lock is released.
"""

import logging
import random
import threading
import time
from collections import defaultdict
from typing import Callable, Dict, List, Optional, Set, Tuple

from unoroom.game import projection, rules
from unoroom.game.cards import Card, Color
from unoroom.game.errors import (
    GameNotActive,
    InvariantViolation,
    RoomFull,
    RoomNotFound,
    Unauthorized,
)
from unoroom.game.events import Event, EventKind
from unoroom.game.room import Player, Room, RoomStatus
from unoroom.protocol import (
    CallUno,
    CreateRoom,
    DrawCard,
    JoinRoom,
    LeaveRoom,
    PlayCard,
    ReconnectRoom,
    normalize_code,
)
from .timers import GraceTimer, start_grace_timer

CODE_ALPHABET = 'ABCDEFGHJKLMNPQRSTUVWXYZ23456789'

Outbox = List[Tuple[str, str, dict]]


class RoomManager:
    def __init__(
        self,
        grace_period: float = 30.0,
        code_length: int = 5,
        hand_size: int = rules.HAND_SIZE,
        replenish: bool = True,
        deliver: Optional[Callable[[str, str, dict], None]] = None,
        spawn: Optional[Callable] = None,
        sleep: Callable[[float], None] = time.sleep,
        on_game_over: Optional[Callable[[str], None]] = None,
        rng: Optional[random.Random] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.grace_period = grace_period
        self.code_length = code_length
        self.hand_size = hand_size
        self.replenish = replenish
        self.deliver = deliver
        self.spawn = spawn
        self.sleep = sleep
        self.on_game_over = on_game_over
        self.logger = logger or logging.getLogger(__name__)
        self._rng = rng or random.Random()
        self._lock = threading.Lock()
        self.reset()

    def init_app(self, app, socketio, namespace: str = '/ws') -> None:
        """Bind to a Flask app: config, logger, Socket.IO delivery and timers."""
        from unoroom.services.leaderboard import record_win

        cfg = app.config
        self.grace_period = float(cfg.get('DISCONNECT_GRACE_SEC', 30))
        self.code_length = int(cfg.get('ROOM_CODE_LENGTH', 5))
        self.hand_size = int(cfg.get('HAND_SIZE', rules.HAND_SIZE))
        self.replenish = bool(cfg.get('REPLENISH_EXHAUSTED_DECK', True))
        self.logger = app.logger

        def _deliver(handle: str, event: str, payload: dict) -> None:
            socketio.emit(event, payload, to=handle, namespace=namespace)

        self.deliver = _deliver
        # Grace timers stay pending in tests unless explicitly enabled
        if cfg.get('TESTING') and not cfg.get('ENABLE_GRACE_TIMERS_IN_TESTS'):
            self.spawn = None
        else:
            self.spawn = socketio.start_background_task
            self.sleep = socketio.sleep
        self.on_game_over = lambda identity: record_win(app, identity, socketio)
        self.reset()
        app.extensions['room_manager'] = self

    def reset(self) -> None:
        self._rooms: Dict[str, Room] = {}
        self._identities: Dict[str, str] = {}
        self._handle_rooms: Dict[str, Set[str]] = defaultdict(set)

    # ---- registry ----

    def get_room(self, code: str) -> Optional[Room]:
        return self._rooms.get(normalize_code(code))

    def _require_room(self, code: str) -> Room:
        with self._lock:
            room = self._rooms.get(normalize_code(code))
        if room is None:
            raise RoomNotFound()
        return room

    def _new_code(self) -> str:
        while True:
            code = ''.join(self._rng.choices(CODE_ALPHABET, k=self.code_length))
            if code not in self._rooms:
                return code

    def _track(self, handle: str, code: str) -> None:
        with self._lock:
            self._handle_rooms[handle].add(code)

    def _untrack(self, handle: str, code: str) -> None:
        with self._lock:
            codes = self._handle_rooms.get(handle)
            if codes is not None:
                codes.discard(code)
                if not codes:
                    del self._handle_rooms[handle]

    # ---- connections ----

    def connect(self, handle: str, identity: str) -> None:
        with self._lock:
            self._identities[handle] = identity

    def identity_for(self, handle: str) -> str:
        identity = self._identities.get(handle)
        if identity is None:
            raise Unauthorized()
        return identity

    def disconnect(self, handle: str) -> None:
        """Socket went away: hold every seat it occupied for the grace period."""
        with self._lock:
            identity = self._identities.pop(handle, None)
            codes = self._handle_rooms.pop(handle, set())
        if identity is None:
            return
        for code in codes:
            try:
                self._apply(code, lambda room: self._detach(room, identity, handle))
            except RoomNotFound:
                continue

    # ---- actions ----

    def dispatch(self, handle: str, action) -> dict:
        """Run one parsed action for the connection and build its ack."""
        if isinstance(action, CreateRoom):
            return {'ok': True, 'code': self.create_room(handle)}
        if isinstance(action, JoinRoom):
            return {'ok': True, 'code': self.join_room(handle, action.code)}
        if isinstance(action, ReconnectRoom):
            return {'ok': True, 'code': self.reconnect_room(handle, action.code)}
        if isinstance(action, PlayCard):
            self.play_card(handle, action.code, action.card_id, action.chosen_color)
            return {'ok': True}
        if isinstance(action, DrawCard):
            card = self.draw_card(handle, action.code)
            return {'ok': True, 'card': card.to_dict()}
        if isinstance(action, CallUno):
            return {'ok': True, 'declared': self.call_uno(handle, action.code)}
        if isinstance(action, LeaveRoom):
            self.leave_room(handle, action.code)
            return {'ok': True}
        raise TypeError(f'Unsupported action: {action!r}')

    def create_room(self, handle: str) -> str:
        identity = self.identity_for(handle)
        room_rng = random.Random(self._rng.getrandbits(64))
        with self._lock:
            code = self._new_code()
            room = Room(code, rng=room_rng, replenish=self.replenish)
            room.seat(identity, handle)
            room.last_event = Event(EventKind.JOINED, actor=identity)
            self._rooms[code] = room
            self._handle_rooms[handle].add(code)
        self.logger.info(f"[room-create] code={code} by={identity}")
        with room.lock:
            outbox = self._snapshot(room)
            ticket = room.take_ticket()
        self._flush(room, ticket, outbox)
        return code

    def join_room(self, handle: str, code: str) -> str:
        identity = self.identity_for(handle)

        def _join(room: Room) -> str:
            player = room.players.get(identity)
            if player is not None:
                self._attach(room, player, handle)
            else:
                if room.is_full:
                    raise RoomFull()
                if room.status is not RoomStatus.WAITING:
                    raise GameNotActive()
                room.seat(identity, handle)
                self._track(handle, room.code)
                room.last_event = Event(EventKind.JOINED, actor=identity)
                self.logger.info(f"[room-join] code={room.code} user={identity}")
            self._maybe_start(room)
            return room.code

        return self._apply(code, _join)

    def reconnect_room(self, handle: str, code: str) -> str:
        identity = self.identity_for(handle)

        def _reconnect(room: Room) -> str:
            self._attach(room, room.player(identity), handle)
            self._maybe_start(room)
            return room.code

        return self._apply(code, _reconnect)

    def play_card(self, handle: str, code: str, card_id: str, chosen_color: Optional[Color] = None) -> Event:
        identity = self.identity_for(handle)
        return self._apply(code, lambda room: rules.play_card(room, identity, card_id, chosen_color))

    def draw_card(self, handle: str, code: str) -> Card:
        identity = self.identity_for(handle)
        return self._apply(code, lambda room: rules.draw_card(room, identity))

    def call_uno(self, handle: str, code: str) -> bool:
        identity = self.identity_for(handle)
        return self._apply(code, lambda room: rules.call_uno(room, identity))

    def leave_room(self, handle: str, code: str) -> None:
        """Quit: same as grace expiry, but immediate."""
        identity = self.identity_for(handle)

        def _leave(room: Room) -> None:
            room.player(identity)
            self._remove_seat(room, identity, reason='quit')

        self._apply(code, _leave)

    def expire(self, timer: GraceTimer) -> None:
        """Grace period ran out; a no-op for rooms or timers that are gone."""
        self.logger.info(f"[grace-fire] code={timer.code} user={timer.identity}")
        try:
            self._apply(timer.code, lambda room: self._expire_seat(room, timer))
        except RoomNotFound:
            self.logger.info(f"[grace-abort] code={timer.code} room gone")

    # ---- internals (room lock held) ----

    def _apply(self, code: str, mutate):
        room = self._require_room(code)
        error = None
        winner = None
        with room.lock:
            if room.closed:
                raise RoomNotFound()
            before = room.status
            try:
                result = mutate(room)
                rules.verify_card_count(room)
            except InvariantViolation as exc:
                outbox = self._terminate(room, exc)
                error = exc
            else:
                outbox = [] if room.closed else self._snapshot(room)
                if before is not RoomStatus.FINISHED and room.status is RoomStatus.FINISHED:
                    winner = room.winner
            ticket = room.take_ticket()
        self._flush(room, ticket, outbox)
        if winner:
            self.logger.info(f"[game-over] code={room.code} winner={winner}")
            if self.on_game_over:
                self.on_game_over(winner)
        if error is not None:
            raise error
        return result

    def _snapshot(self, room: Room) -> Outbox:
        room.version += 1
        return [(handle, 'state', view) for handle, view in projection.snapshots(room)]

    def _flush(self, room: Room, ticket: int, outbox: Outbox) -> None:
        """Deliver one batch once every earlier batch for the room has gone out."""
        with room.send_turn:
            room.send_turn.wait_for(lambda: room.now_serving == ticket)
            try:
                if self.deliver is not None:
                    for handle, event, payload in outbox:
                        self.deliver(handle, event, payload)
            finally:
                room.now_serving += 1
                room.send_turn.notify_all()

    def _maybe_start(self, room: Room) -> None:
        if room.status is RoomStatus.WAITING and len(room.connected_players()) == 2:
            opening = rules.start_game(room, self.hand_size)
            self.logger.info(f"[game-start] code={room.code} seats={room.seats} opening={opening}")

    def _attach(self, room: Room, player: Player, handle: str) -> None:
        self._cancel_timer(player)
        if player.handle and player.handle != handle:
            self._untrack(player.handle, room.code)
        player.handle = handle
        self._track(handle, room.code)
        self.logger.info(f"[room-attach] code={room.code} user={player.identity}")

    def _detach(self, room: Room, identity: str, handle: str) -> None:
        player = room.players.get(identity)
        if player is None or player.handle != handle:
            return
        player.handle = None
        self._cancel_timer(player)
        player.grace_timer = start_grace_timer(
            room.code, identity, self.grace_period, self.expire, spawn=self.spawn, sleep=self.sleep,
        )
        self.logger.info(f"[grace-start] code={room.code} user={identity} delay={self.grace_period}s")

    def _expire_seat(self, room: Room, timer: GraceTimer) -> None:
        player = room.players.get(timer.identity)
        if player is None or player.grace_timer is not timer or timer.cancelled:
            return
        player.grace_timer = None
        self._remove_seat(room, timer.identity, reason='timeout')

    def _cancel_timer(self, player: Player) -> None:
        if player.grace_timer is not None:
            player.grace_timer.cancel()
            player.grace_timer = None

    def _remove_seat(self, room: Room, identity: str, reason: str) -> None:
        player = room.players[identity]
        self._cancel_timer(player)
        if player.handle:
            self._untrack(player.handle, room.code)
        opponent = room.opponent_of(identity)
        room.unseat(identity)
        room.last_event = Event(EventKind.LEFT, actor=identity)
        self.logger.info(f"[room-leave] code={room.code} user={identity} reason={reason}")
        if room.status is RoomStatus.PLAYING and opponent is not None:
            rules.finish(room, opponent.identity, loser=identity)
            self.logger.info(f"[forfeit] code={room.code} winner={opponent.identity} loser={identity}")
        if room.is_empty:
            self._destroy(room)

    def _destroy(self, room: Room) -> None:
        room.closed = True
        for player in room.players.values():
            self._cancel_timer(player)
            if player.handle:
                self._untrack(player.handle, room.code)
        with self._lock:
            self._rooms.pop(room.code, None)
        self.logger.info(f"[room-destroy] code={room.code}")

    def _terminate(self, room: Room, exc: InvariantViolation) -> Outbox:
        self.logger.error(f"[room-terminate] code={room.code} reason={exc.code} detail={exc}")
        notice = {'code': room.code, 'reason': exc.code}
        outbox = [(p.handle, 'room_closed', notice) for p in room.connected_players()]
        self._destroy(room)
        return outbox
