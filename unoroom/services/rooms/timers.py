import time
from typing import Callable, Optional


class GraceTimer:
    """Pending forfeit for one disconnected seat.

    The room manager stores the handle on the seat and cancels it on
    reconnect or when the room goes away. A fired timer only acts if it is
    still the seat's current timer, checked under the room lock.
    """

    def __init__(self, code: str, identity: str, delay: float):
        self.code = code
        self.identity = identity
        self.delay = delay
        self.deadline = time.time() + delay
        self.cancelled = False
        self.started = False

    def __repr__(self):
        state = 'cancelled' if self.cancelled else ('running' if self.started else 'pending')
        return f"<GraceTimer {self.code}/{self.identity} {self.delay}s {state}>"

    def cancel(self) -> None:
        self.cancelled = True


def start_grace_timer(
    code: str,
    identity: str,
    delay: float,
    on_expire: Callable[[GraceTimer], None],
    spawn: Optional[Callable] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> GraceTimer:
    """Create a grace timer and run it on ``spawn`` (a background-task starter).

    With no ``spawn`` the timer is returned unstarted; whoever holds it can
    fire it by calling ``on_expire`` directly.
    """
    timer = GraceTimer(code, identity, delay)
    if spawn is None:
        return timer

    def _worker(t: GraceTimer):
        sleep_for = max(0.0, t.deadline - time.time())
        if sleep_for:
            sleep(sleep_for)
        if t.cancelled:
            return
        on_expire(t)

    spawn(_worker, timer)
    timer.started = True
    return timer
