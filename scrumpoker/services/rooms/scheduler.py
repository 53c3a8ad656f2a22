import logging
import threading
import time
from typing import Callable, Dict, Hashable, Optional, Tuple

from .store import RoomStore


class DeferredActions:
    """Keyed, cancellable actions that run once a deadline has passed.

    Each schedule() hands out a fresh token that is stored with the entry. A
    runner only fires the entry if it is still present with the same token,
    so cancelling, rescheduling (even at the same instant) and firing twice
    are all safe.

    With ``spawn`` set (normally ``socketio.start_background_task``) every
    schedule() starts a worker that sleeps until the deadline. Without it,
    nothing runs on its own and callers drive it through run_due(), which is
    what tests do with a fake clock.
    """

    def __init__(self, clock: Callable[[], float] = time.time, spawn=None, sleep=time.sleep,
                 logger: Optional[logging.Logger] = None):
        self.clock = clock
        self.spawn = spawn
        self.sleep = sleep
        self.logger = logger or logging.getLogger(__name__)
        self._lock = threading.Lock()
        self._pending: Dict[Hashable, Tuple[float, object, Callable[[], None]]] = {}

    def schedule(self, key: Hashable, delay_sec: float, action: Callable[[], None]) -> object:
        deadline = self.clock() + delay_sec
        token = object()
        with self._lock:
            self._pending[key] = (deadline, token, action)
        self.logger.debug(f"[timer-set] key={key} delay={delay_sec}s")
        if self.spawn is not None:
            self.spawn(self._runner, key, deadline, token)
        return token

    def cancel(self, key: Hashable) -> bool:
        with self._lock:
            entry = self._pending.pop(key, None)
        if entry is not None:
            self.logger.debug(f"[timer-cancel] key={key}")
        return entry is not None

    def is_pending(self, key: Hashable) -> bool:
        return key in self._pending

    def fire(self, key: Hashable, token: object) -> bool:
        with self._lock:
            entry = self._pending.get(key)
            if entry is None or entry[1] is not token:
                return False
            del self._pending[key]
        self.logger.debug(f"[timer-fire] key={key}")
        entry[2]()
        return True

    def run_due(self) -> int:
        """Fire every entry whose deadline has passed; returns how many ran."""
        now = self.clock()
        with self._lock:
            due = [(key, token) for key, (deadline, token, _) in self._pending.items() if deadline <= now]
        return sum(1 for key, token in due if self.fire(key, token))

    def _runner(self, key: Hashable, deadline: float, token: object) -> None:
        sleep_for = max(0.0, deadline - self.clock())
        if sleep_for:
            self.sleep(sleep_for)
        try:
            self.fire(key, token)
        except Exception:
            self.logger.exception(f"[timer-error] key={key}")


class RoomJanitor:
    """Recurring sweep that deletes empty, idle rooms from the store."""

    def __init__(self, store: RoomStore, interval_sec: float = 60, threshold_sec: float = 30 * 60,
                 spawn=None, sleep=time.sleep):
        self.store = store
        self.interval_sec = interval_sec
        self.threshold_sec = threshold_sec
        self.spawn = spawn
        self.sleep = sleep
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def sweep(self) -> int:
        cleaned = self.store.cleanup(threshold_sec=self.threshold_sec)
        if cleaned:
            self.store.logger.info(f"[cleanup] removed {cleaned} stale room(s)")
        return cleaned

    def start(self) -> None:
        if self._running or self.spawn is None:
            return
        self._running = True
        self.spawn(self._loop)

    def stop(self) -> None:
        self._running = False

    def _loop(self) -> None:
        while self._running:
            self.sleep(self.interval_sec)
            if not self._running:
                break
            try:
                self.sweep()
            except Exception:
                self.store.logger.exception("[cleanup] sweep failed")
