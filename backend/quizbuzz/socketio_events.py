from functools import wraps
from typing import Any, Dict

from flask import current_app, request
from flask_socketio import emit

from quizbuzz import socketio
from quizbuzz.exceptions import InvalidInput, QuizBuzzError
from quizbuzz.models import Participant, is_valid_participant_id
from quizbuzz.services.rooms import buzz
from quizbuzz.services.rooms.broadcast import EVENT_CONNECTED, EVENT_ERROR


def _services() -> Dict[str, Any]:
    return current_app.extensions['quizbuzz']


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _require_room_code(data) -> str:
    room_code = data.get('roomCode') if isinstance(data, dict) else None
    if not room_code or not isinstance(room_code, str):
        raise InvalidInput('roomCode is required')
    return room_code


def guarded(failure_message: str):
    """Rate-limit a handler and keep its failures on this connection.

    Messages over the window's limit are dropped without a reply. Known
    errors are reported with their detail; anything else is logged and
    reported with the generic failure message only.
    """
    def decorator(handler):
        @wraps(handler)
        def wrapper(*args):
            sid = _get_sid()
            if not _services()['gateway'].admit(sid):
                return
            try:
                handler(*args)
            except QuizBuzzError as exc:
                current_app.logger.info(f"{handler.__name__} rejected for {sid}: {exc}")
                emit(EVENT_ERROR, {'message': f"{failure_message}: {exc}"})
            except Exception as exc:
                current_app.logger.exception(f"Error in {handler.__name__} handler: {exc}")
                emit(EVENT_ERROR, {'message': failure_message})
        return wrapper
    return decorator


def handle_connect(auth=None):
    sid = _get_sid()
    if _services()['gateway'].open(sid) is None:
        return False
    current_app.logger.info(f"New client connected from {request.remote_addr} ({sid})")
    emit(EVENT_CONNECTED, {'sid': sid})


def handle_disconnect(reason=None):
    _services()['gateway'].close(_get_sid())


def handle_pong(data=None):
    _services()['gateway'].acknowledge(_get_sid())


@guarded('Failed to join room')
def handle_join(data=None):
    room_code = _require_room_code(data)
    participant = Participant.from_payload(data.get('player'))
    current_app.logger.info(f"Handling join for roomCode: {room_code}, player: {participant.name}")
    _services()['gateway'].join(_get_sid(), room_code, participant)


@guarded('Failed to process buzz')
def handle_buzz(data=None):
    room_code = _require_room_code(data)
    participant = Participant.from_payload(data.get('player'))
    buzz(_services()['registry'], room_code, participant)


@guarded('Failed to start question')
def handle_start_question(data=None):
    _services()['registry'].start_question(_require_room_code(data))


@guarded('Failed to start game')
def handle_game_start(data=None):
    _services()['registry'].game_start(_require_room_code(data))


@guarded('Failed to update score')
def handle_update_score(data=None):
    room_code = _require_room_code(data)
    participant_id = data.get('playerId', data.get('participantId'))
    if not is_valid_participant_id(participant_id):
        raise InvalidInput('playerId is required')
    _services()['registry'].update_score(room_code, participant_id, data.get('score'))


@guarded('Failed to process message')
def handle_unknown_event(event, *args):
    current_app.logger.warning(f"Ignoring unknown event '{event}' from {_get_sid()}")


def register_socketio_handlers(namespace: str = '/') -> None:
    """Register Socket.IO event handlers on ``namespace``.

    The catch-all handler only sees events without a handler of their own.
    """
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event('pong', handle_pong, namespace=namespace)
    socketio.on_event('join', handle_join, namespace=namespace)
    socketio.on_event('buzz', handle_buzz, namespace=namespace)
    socketio.on_event('startQuestion', handle_start_question, namespace=namespace)
    socketio.on_event('gameStart', handle_game_start, namespace=namespace)
    socketio.on_event('updateScore', handle_update_score, namespace=namespace)
    socketio.on_event('*', handle_unknown_event, namespace=namespace)
