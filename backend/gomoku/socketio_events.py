from flask import current_app, request
from flask_socketio import join_room

from gomoku import get_registry, socketio
from gomoku.services.games.registry import LOBBY_GROUP
from gomoku.services.games.room import RoomFullError

NAMESPACE = '/'


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _coordinate(value):
    # JSON numbers arrive as int or float; only exact ints (or digit strings) name a cell
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.isdigit():
        return int(value)
    return None


def _room_token(token):
    if isinstance(token, bool):
        return None
    if isinstance(token, int):
        return str(token)
    if isinstance(token, str) and token:
        return token
    return None


def handle_connect(auth=None):
    sid = _get_sid()
    current_app.logger.info(f"[connect] sid={sid}")
    if request.args.get('page') == 'home':
        join_room(LOBBY_GROUP)
    get_registry().broadcast_listing()


def handle_disconnect(reason=None):
    sid = _get_sid()
    current_app.logger.info(f"[disconnect] sid={sid} reason={reason}")
    registry = get_registry()
    if registry.leave(sid) is not None:
        registry.broadcast_listing()


def handle_join_room(data):
    """Seat the caller in room ``data``. Numeric ids are accepted as strings."""
    token = _room_token(data)
    if token is None:
        current_app.logger.debug(f"[join-ignored] sid={_get_sid()} token={data!r}")
        return
    registry = get_registry()
    try:
        registry.join(token, _get_sid())
    except RoomFullError:
        current_app.logger.info(f"[room-full] room={token} sid={_get_sid()}")
        socketio.emit('redirectHome', to=_get_sid(), namespace=NAMESPACE)
        return
    registry.broadcast_listing()


def handle_make_move(data):
    if not isinstance(data, dict):
        row = col = None
    else:
        row, col = _coordinate(data.get('row')), _coordinate(data.get('col'))
    if row is None or col is None:
        current_app.logger.debug(f"[move-ignored] sid={_get_sid()} payload={data!r}")
        return
    room = get_registry().find_room_by_sid(_get_sid())
    if room is None:
        return
    room.move(_get_sid(), row, col)


def handle_pass_turn(data=None):
    room = get_registry().find_room_by_sid(_get_sid())
    if room is None:
        return
    room.pass_turn(_get_sid())


def handle_reset_request(data=None):
    room = get_registry().find_room_by_sid(_get_sid())
    if room is None:
        return
    room.request_reset(_get_sid())


def handle_error(exc):
    # Keep a failing handler contained to the event that raised it
    current_app.logger.exception(f"[socket-error] sid={_get_sid()} error={exc}")


def register_socketio_handlers() -> None:
    """Register Socket.IO event handlers on the default namespace."""
    socketio.on_event('connect', handle_connect, namespace=NAMESPACE)
    socketio.on_event('disconnect', handle_disconnect, namespace=NAMESPACE)
    socketio.on_event('joinRoom', handle_join_room, namespace=NAMESPACE)
    socketio.on_event('makeMove', handle_make_move, namespace=NAMESPACE)
    socketio.on_event('passTurn', handle_pass_turn, namespace=NAMESPACE)
    socketio.on_event('resetRequest', handle_reset_request, namespace=NAMESPACE)
    socketio.on_error(NAMESPACE)(handle_error)
