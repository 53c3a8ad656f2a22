from flask import current_app, request
from scrumpoker import socketio
from scrumpoker.services.rooms import SessionProtocol

# Client -> server event names
JOIN_ROOM = 'join-room'
SELECT_CARD = 'select-card'
REVEAL_CARDS = 'reveal-cards'
RESET_GAME = 'reset-game'
REMOVE_PLAYER = 'remove-player'


def _session() -> SessionProtocol:
    return current_app.extensions['scrumpoker'].session


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def handle_connect(auth=None):
    current_app.logger.debug(f"[connect] sid={_get_sid()}")


def handle_disconnect(reason=None):
    sid = _get_sid()
    current_app.logger.debug(f"[disconnect] sid={sid} reason={reason}")
    _session().disconnect(sid)


def handle_join_room(data):
    # The return value is sent back as the acknowledgement
    return _session().join(_get_sid(), data)


def handle_select_card(data):
    _session().select_card(_get_sid(), data)


def handle_reveal_cards(data):
    _session().reveal_cards(_get_sid(), data)


def handle_reset_game(data):
    _session().reset_game(_get_sid(), data)


def handle_remove_player(data):
    _session().remove_player(_get_sid(), data)


def register_socketio_handlers(namespace: str = '/') -> None:
    """Register the room protocol's Socket.IO event handlers on ``namespace``."""
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event(JOIN_ROOM, handle_join_room, namespace=namespace)
    socketio.on_event(SELECT_CARD, handle_select_card, namespace=namespace)
    socketio.on_event(REVEAL_CARDS, handle_reveal_cards, namespace=namespace)
    socketio.on_event(RESET_GAME, handle_reset_game, namespace=namespace)
    socketio.on_event(REMOVE_PLAYER, handle_remove_player, namespace=namespace)
