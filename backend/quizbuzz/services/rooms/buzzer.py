"""First-buzz-wins arbitration.

"First" is the first buzz this process accepts, in the order handlers take
the registry lock. Client clocks are never consulted since nothing keeps
them in sync with the server.
"""
import logging
from typing import Optional

from quizbuzz.models import Participant, RoomState
from .broadcast import EVENT_BUZZED

logger = logging.getLogger(__name__)


def accept_buzz(room: Optional[RoomState], participant: Participant) -> Optional[Participant]:
    """Record ``participant`` as the winner if the buzz counts.

    Returns the winning record, or None when the buzz is dropped (no room,
    no active question, or a winner already set for this question).
    """
    if room is None or not room.question_active:
        return None
    if room.buzzer_winner is not None:
        return None
    room.buzzer_winner = room.participants.get(participant.id, participant)
    return room.buzzer_winner


def buzz(registry, room_code: str, participant: Participant) -> Optional[Participant]:
    with registry.lock:
        winner = accept_buzz(registry.find(room_code), participant)
        if winner is None:
            logger.debug(f"Dropped buzz from {participant.id} in room {room_code}")
            return None
        logger.info(f"First buzz in room {room_code} by {winner.name or winner.id}")
        registry.broadcaster.broadcast(room_code, EVENT_BUZZED, {
            'roomCode': room_code,
            'player': winner.to_dict(),
        })
        return winner
