"""Errors raised by room operations.

Handlers at the connection boundary turn these into an ``error`` event for
the originating connection only.
"""


class QuizBuzzError(Exception):
    """Base class for every room operation failure."""
    pass


class InvalidInput(QuizBuzzError):
    """A request is missing its room code, participant or participant id."""
    pass


class RoomNotFound(QuizBuzzError):
    def __init__(self, room_code):
        self.room_code = room_code
        super().__init__(f"Room {room_code} not found")
