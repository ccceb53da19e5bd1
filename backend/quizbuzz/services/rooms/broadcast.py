import logging

logger = logging.getLogger(__name__)

# Server -> client event names
EVENT_CONNECTED = 'connected'
EVENT_PING = 'ping'
EVENT_UPDATE = 'update'
EVENT_BUZZED = 'buzzed'
EVENT_QUESTION_START = 'questionStart'
EVENT_GAME_START = 'gameStart'
EVENT_SCORE_UPDATE = 'scoreUpdate'
EVENT_ERROR = 'error'


class Broadcaster:
    """Delivers events to the connections bound to a room.

    Room membership is the Socket.IO room named after the room code, so a
    connection that has already closed is dropped by the server manager and
    never receives anything.
    """

    def __init__(self, socketio, namespace: str = '/'):
        self.socketio = socketio
        self.namespace = namespace

    def broadcast(self, room_code: str, event: str, payload: dict) -> None:
        logger.debug(f"[broadcast] room={room_code} event={event}")
        self.socketio.emit(event, payload, to=room_code, namespace=self.namespace)

    def send(self, sid: str, event: str, payload: dict) -> None:
        self.socketio.emit(event, payload, to=sid, namespace=self.namespace)

    def enter_room(self, sid: str, room_code: str) -> None:
        self.socketio.server.enter_room(sid, room_code, namespace=self.namespace)

    def leave_room(self, sid: str, room_code: str) -> None:
        self.socketio.server.leave_room(sid, room_code, namespace=self.namespace)

    def close(self, sid: str) -> None:
        """Forcibly disconnect one connection; its disconnect handler runs."""
        self.socketio.server.disconnect(sid, namespace=self.namespace)
