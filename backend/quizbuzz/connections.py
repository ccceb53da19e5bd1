"""Connection lifecycle: liveness, rate limiting and identity binding.

Each Socket.IO connection gets a ConnectionContext. The context only points
at its room and participant by code and id; the registry owns the state.
"""
import logging
import threading
from typing import Any, Dict, Optional, Tuple

from quizbuzz.exceptions import QuizBuzzError
from quizbuzz.models import Participant
from quizbuzz.services.rooms.broadcast import EVENT_PING
from quizbuzz.services.timers import RepeatingTask

logger = logging.getLogger(__name__)

Identity = Tuple[str, Any]


class ConnectionContext:
    def __init__(self, sid: str):
        self.sid = sid
        self.room_code: Optional[str] = None
        self.participant_id: Any = None
        self.is_alive = True
        self.message_count = 0
        self.heartbeat_task: Optional[RepeatingTask] = None
        self.rate_limit_task: Optional[RepeatingTask] = None
        self.closed = False

    @property
    def identity(self) -> Optional[Identity]:
        if self.room_code is None or self.participant_id is None:
            return None
        return (self.room_code, self.participant_id)

    def bind(self, room_code: str, participant_id) -> None:
        self.room_code = room_code
        self.participant_id = participant_id

    def unbind(self) -> Optional[Identity]:
        identity = self.identity
        self.room_code = None
        self.participant_id = None
        return identity

    def cancel_timers(self) -> None:
        for task in (self.heartbeat_task, self.rate_limit_task):
            if task is not None:
                task.cancel()


class ConnectionGateway:
    """Tracks open connections and runs their per-connection timers.

    ``close()`` is the single teardown path: it cancels both timers and runs
    ``leave`` for the bound identity, at most once per connection.
    """

    def __init__(self, registry, broadcaster, rate_limit: int = 100,
                 rate_limit_window: float = 60, heartbeat_interval: float = 30,
                 spawn=None):
        self.registry = registry
        self.broadcaster = broadcaster
        self.rate_limit = rate_limit
        self.rate_limit_window = rate_limit_window
        self.heartbeat_interval = heartbeat_interval
        self.accepting = True
        self._spawn = spawn
        self._lock = threading.RLock()
        self._connections: Dict[str, ConnectionContext] = {}
        self._identities: Dict[Identity, str] = {}

    def __len__(self):
        return len(self._connections)

    def get(self, sid: str) -> Optional[ConnectionContext]:
        return self._connections.get(sid)

    def require(self, sid: str) -> ConnectionContext:
        ctx = self._connections.get(sid)
        if ctx is None:
            raise QuizBuzzError(f"Connection {sid} is not open")
        return ctx

    def sid_for(self, room_code: str, participant_id) -> Optional[str]:
        return self._identities.get((room_code, participant_id))

    # ---- lifecycle ----

    def open(self, sid: str) -> Optional[ConnectionContext]:
        if not self.accepting:
            logger.info(f"Refusing connection {sid}: shutting down")
            return None
        ctx = ConnectionContext(sid)
        if self.heartbeat_interval:
            ctx.heartbeat_task = RepeatingTask(
                self.heartbeat_interval, self.heartbeat_tick, sid,
                name=f'heartbeat:{sid}', spawn=self._spawn,
            ).start()
        if self.rate_limit_window:
            ctx.rate_limit_task = RepeatingTask(
                self.rate_limit_window, self.reset_rate_limit, sid,
                name=f'rate-limit:{sid}', spawn=self._spawn,
            ).start()
        with self._lock:
            self._connections[sid] = ctx
        return ctx

    def close(self, sid: str) -> Optional[ConnectionContext]:
        with self._lock:
            ctx = self._connections.pop(sid, None)
            if ctx is None or ctx.closed:
                return None
            ctx.closed = True
            ctx.cancel_timers()
            identity = ctx.unbind()
            if identity is not None and self._identities.get(identity) == sid:
                del self._identities[identity]
        logger.info(f"Client disconnected: {sid}")
        if identity is not None:
            self.registry.leave(*identity)
        return ctx

    def terminate(self, sid: str) -> None:
        """Force a connection closed from the server side."""
        try:
            self.broadcaster.close(sid)
        finally:
            # The transport runs close() via the disconnect handler; this
            # covers a connection the transport has already forgotten.
            self.close(sid)

    def stop_accepting(self) -> None:
        self.accepting = False

    def shutdown(self) -> None:
        self.stop_accepting()
        with self._lock:
            contexts = list(self._connections.values())
        for ctx in contexts:
            ctx.cancel_timers()

    # ---- liveness ----

    def acknowledge(self, sid: str) -> None:
        ctx = self._connections.get(sid)
        if ctx is not None:
            ctx.is_alive = True

    def heartbeat_tick(self, sid: str) -> bool:
        """Probe one connection; terminate it if the last probe went unanswered.

        Returns False when the connection was terminated or is already gone.
        """
        ctx = self._connections.get(sid)
        if ctx is None or ctx.closed:
            return False
        if not ctx.is_alive:
            logger.warning(f"[heartbeat] no pong from {sid}, terminating")
            self.terminate(sid)
            return False
        ctx.is_alive = False
        self.broadcaster.send(sid, EVENT_PING, {})
        return True

    # ---- rate limiting ----

    def admit(self, sid: str) -> bool:
        """Count one inbound message; False means drop it silently."""
        ctx = self._connections.get(sid)
        if ctx is None:
            return False
        with self._lock:
            ctx.message_count += 1
            allowed = ctx.message_count <= self.rate_limit
        if not allowed:
            logger.debug(f"[rate-limit] dropping message #{ctx.message_count} from {sid}")
        return allowed

    def reset_rate_limit(self, sid: str) -> None:
        ctx = self._connections.get(sid)
        if ctx is not None:
            ctx.message_count = 0

    # ---- identity ----

    def join(self, sid: str, room_code: str, participant: Participant):
        """Bind ``sid`` to ``(room_code, participant.id)`` and join the room.

        A different live connection already holding that identity is
        unbound and closed first, so the participant keeps its room entry
        and score; the newest connection wins.
        """
        ctx = self.require(sid)
        identity = (room_code, participant.id)

        with self._lock:
            prior_sid = self._identities.get(identity)
            prior = self._connections.get(prior_sid) if prior_sid and prior_sid != sid else None
            if prior is not None:
                prior.unbind()
            previous = ctx.identity if ctx.identity != identity else None
            if previous is not None:
                ctx.unbind()
                if self._identities.get(previous) == sid:
                    del self._identities[previous]
            ctx.bind(room_code, participant.id)
            self._identities[identity] = sid

        if prior is not None:
            logger.warning(f"Replacing connection {prior.sid} for participant {participant.id} in room {room_code}")
            self.terminate(prior.sid)
        if previous is not None:
            if previous[0] != room_code:
                self.broadcaster.leave_room(sid, previous[0])
            if previous[1] != participant.id:
                self.registry.leave(*previous)

        self.broadcaster.enter_room(sid, room_code)
        return self.registry.join(room_code, participant)
