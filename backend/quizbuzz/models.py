from typing import Any, Dict, List, Optional

from quizbuzz.exceptions import InvalidInput


class Participant:
    __slots__ = ('id', 'name', 'email', 'score')

    def __init__(self, id, name='', email='', score=0):
        self.id = id
        self.name = name
        self.email = email
        self.score = score

    @classmethod
    def from_payload(cls, data: Any) -> 'Participant':
        """Build a participant from a client ``player`` object.

        Missing display fields default to empty strings and a missing score
        to 0. The id must be a non-empty string or an integer so it can key
        the room's participant mapping.
        """
        if not isinstance(data, dict):
            raise InvalidInput('player data is required')
        participant_id = data.get('id')
        if not is_valid_participant_id(participant_id):
            raise InvalidInput('player id is required')
        return cls(
            id=participant_id,
            name=data.get('name') or '',
            email=data.get('email') or '',
            score=data.get('score') or 0,
        )

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'email': self.email,
            'score': self.score,
        }

    def __eq__(self, other):
        if not isinstance(other, Participant):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        return f"Participant(id={self.id!r}, name={self.name!r}, score={self.score!r})"


def is_valid_participant_id(value) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, str) and value != ''


class RoomState:
    """Question and buzzer state for one room.

    ``WaitingRoom`` is ``question_active == False``; ``QuestionActive`` is
    ``question_active == True``. ``buzzer_winner`` is only ever set while a
    question is active.
    """

    def __init__(self, code: str):
        self.code = code
        self.participants: Dict[Any, Participant] = {}
        self.buzzer_winner: Optional[Participant] = None
        self.question_active = False

    @property
    def is_empty(self) -> bool:
        return not self.participants

    def players(self) -> List[dict]:
        return [p.to_dict() for p in self.participants.values()]

    def to_dict(self):
        return {
            'roomCode': self.code,
            'players': self.players(),
            'questionActive': self.question_active,
            'buzzerWinner': self.buzzer_winner.to_dict() if self.buzzer_winner else None,
        }
