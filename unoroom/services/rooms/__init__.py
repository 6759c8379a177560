"""Room lifecycle services: the room registry and disconnect grace timers.

Transport code (Socket.IO handlers) talks to ``RoomManager``; the manager
drives the pure game engine in ``unoroom.game``.
"""

from .manager import RoomManager
from .timers import GraceTimer, start_grace_timer

__all__ = ['RoomManager', 'GraceTimer', 'start_grace_timer']
