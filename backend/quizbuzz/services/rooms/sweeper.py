import logging
from typing import List, Optional

from quizbuzz.services.timers import RepeatingTask

logger = logging.getLogger(__name__)


class CleanupSweeper:
    """Periodically evicts rooms that have no participants.

    Rooms are never removed on the last leave: in-flight events may still
    reference them. A join that races a sweep just recreates the room.
    """

    def __init__(self, registry, interval: float, spawn=None):
        self.registry = registry
        self.interval = interval
        self._spawn = spawn
        self._task: Optional[RepeatingTask] = None
        self._stopped = False

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.cancelled

    @property
    def cancelled(self) -> bool:
        return self._stopped

    def start(self) -> None:
        if self.running or self._stopped or not self.interval:
            return
        self._task = RepeatingTask(self.interval, self.sweep, name='cleanup-sweep', spawn=self._spawn).start()
        logger.info(f"Cleanup sweeper started (every {self.interval}s)")

    def cancel(self) -> None:
        self._stopped = True
        if self._task is not None:
            self._task.cancel()
            logger.info("Cleanup sweeper cancelled")

    def sweep(self) -> List[str]:
        removed = self.registry.sweep_empty_rooms()
        if removed:
            logger.info(f"[sweep] removed {len(removed)} empty room(s), {len(self.registry)} remaining")
        return removed
