import logging
import threading
from typing import Callable, Optional

from quizbuzz import socketio

logger = logging.getLogger(__name__)


class RepeatingTask:
    """Calls ``func(*args)`` every ``interval`` seconds until cancelled.

    The loop runs as a Socket.IO background task by default so it follows
    whatever async mode the server uses. ``cancel()`` takes effect at the
    next wake-up and never fires ``func`` again.
    """

    def __init__(self, interval: float, func: Callable, *args, name: str = '',
                 spawn: Optional[Callable] = None):
        self.interval = interval
        self.func = func
        self.args = args
        self.name = name or getattr(func, '__name__', 'task')
        self._spawn = spawn or socketio.start_background_task
        self._cancelled = threading.Event()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def start(self) -> 'RepeatingTask':
        self._spawn(self._run)
        return self

    def cancel(self) -> None:
        self._cancelled.set()

    def _run(self) -> None:
        while not self._cancelled.wait(self.interval):
            try:
                self.func(*self.args)
            except Exception:
                logger.exception(f"[timer-error] {self.name} failed")
