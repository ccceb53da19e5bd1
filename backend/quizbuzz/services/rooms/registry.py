import logging
import threading
from typing import Any, Dict, List

from quizbuzz.exceptions import RoomNotFound
from quizbuzz.models import Participant, RoomState
from .broadcast import (
    EVENT_GAME_START,
    EVENT_QUESTION_START,
    EVENT_SCORE_UPDATE,
    EVENT_UPDATE,
)

logger = logging.getLogger(__name__)


class RoomRegistry:
    """Process-wide map of room code -> RoomState.

    Every operation takes ``self.lock`` for its whole read-then-write and
    issues its broadcast as the last step while still holding it, so a
    listener never sees an event for a state the room has not reached and
    per-room events go out in mutation order. Empty rooms are left in place
    for the cleanup sweeper.
    """

    def __init__(self, broadcaster):
        self.broadcaster = broadcaster
        self.lock = threading.RLock()
        self._rooms: Dict[str, RoomState] = {}

    def __len__(self):
        return len(self._rooms)

    def __contains__(self, room_code):
        return room_code in self._rooms

    def room_codes(self) -> List[str]:
        with self.lock:
            return list(self._rooms)

    def find(self, room_code: str):
        return self._rooms.get(room_code)

    def get(self, room_code: str) -> RoomState:
        room = self._rooms.get(room_code)
        if room is None:
            raise RoomNotFound(room_code)
        return room

    def get_or_create(self, room_code: str) -> RoomState:
        with self.lock:
            room = self._rooms.get(room_code)
            if room is None:
                room = RoomState(room_code)
                self._rooms[room_code] = room
                logger.info(f"Created room {room_code}")
            return room

    def join(self, room_code: str, participant: Participant) -> RoomState:
        with self.lock:
            left = []
            for code, other in self._rooms.items():
                if code != room_code and other.participants.pop(participant.id, None) is not None:
                    left.append(other)

            room = self.get_or_create(room_code)
            existing = room.participants.get(participant.id)
            if existing is None:
                room.participants[participant.id] = participant
            else:
                # Rejoining keeps the score earned so far
                existing.name = participant.name
                existing.email = participant.email

            logger.info(f"Participant {participant.id} joined room {room_code} ({len(room.participants)} players)")
            for other in left:
                logger.info(f"Participant {participant.id} moved out of room {other.code}")
                self._broadcast_players(other, EVENT_UPDATE)
            self._broadcast_players(room, EVENT_UPDATE)
            return room

    def leave(self, room_code: str, participant_id: Any) -> bool:
        with self.lock:
            room = self._rooms.get(room_code)
            if room is None:
                return False
            removed = room.participants.pop(participant_id, None) is not None
            if removed:
                logger.info(f"Participant {participant_id} left room {room_code}")
            self._broadcast_players(room, EVENT_UPDATE)
            return removed

    def start_question(self, room_code: str) -> RoomState:
        with self.lock:
            room = self.get(room_code)
            room.buzzer_winner = None
            room.question_active = True
            logger.info(f"Starting new question for room: {room_code}")
            self.broadcaster.broadcast(room_code, EVENT_QUESTION_START, {'roomCode': room_code})
            return room

    def game_start(self, room_code: str) -> RoomState:
        """Return the room to the waiting state; used to begin and to reset a game."""
        with self.lock:
            room = self.get(room_code)
            room.buzzer_winner = None
            room.question_active = False
            logger.info(f"Starting game for room: {room_code}")
            self.broadcaster.broadcast(room_code, EVENT_GAME_START, {'roomCode': room_code})
            return room

    def update_score(self, room_code: str, participant_id: Any, score) -> bool:
        with self.lock:
            room = self.get(room_code)
            participant = room.participants.get(participant_id)
            if participant is None:
                return False
            participant.score = score
            self._broadcast_players(room, EVENT_SCORE_UPDATE)
            return True

    def sweep_empty_rooms(self) -> List[str]:
        with self.lock:
            empty = [code for code, room in self._rooms.items() if room.is_empty]
            for code in empty:
                del self._rooms[code]
                logger.info(f"Cleaned up empty room: {code}")
            return empty

    def _broadcast_players(self, room: RoomState, event: str) -> None:
        self.broadcaster.broadcast(room.code, event, {
            'roomCode': room.code,
            'players': room.players(),
        })
