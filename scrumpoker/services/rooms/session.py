import logging
from functools import partial
from typing import Dict, Optional

from scrumpoker.models import is_card_value
from . import payloads
from .game_logic import GameLogic
from .players import PlayerLifecycle
from .scheduler import DeferredActions
from .store import RoomStore


def _text(data, key: str) -> Optional[str]:
    value = data.get(key)
    if isinstance(value, str) and value.strip():
        return value
    return None


class SessionProtocol:
    """Translates client actions into room mutations and fans out the results.

    ``sid`` is the Socket.IO session id of the calling connection; it is also
    the player id for as long as that connection lives. All room mutations go
    through the lifecycle manager and game logic while the store lock is held,
    and the resulting events are emitted before the lock is released, so the
    order participants observe matches the order actions were processed.
    """

    def __init__(self, socketio, store: RoomStore, players: PlayerLifecycle, game: GameLogic,
                 deferred: DeferredActions, grace_period_sec: float = 30,
                 removal_delay_sec: float = 0.1, namespace: str = '/',
                 logger: Optional[logging.Logger] = None):
        self.socketio = socketio
        self.store = store
        self.players = players
        self.game = game
        self.deferred = deferred
        self.grace_period_sec = grace_period_sec
        self.removal_delay_sec = removal_delay_sec
        self.namespace = namespace
        self.logger = logger or logging.getLogger(__name__)
        # sid -> room code the connection holds a seat in
        self.connections: Dict[str, str] = {}

    # ---- transport helpers ----

    def _emit(self, event: str, payload, to: str, skip_sid: Optional[str] = None) -> None:
        self.socketio.emit(event, payload, to=to, skip_sid=skip_sid, namespace=self.namespace)

    def _error(self, sid: str, message: str, code: str) -> None:
        self._emit(payloads.ERROR, payloads.error_payload(message, code), to=sid)

    def _is_member(self, room_code: str, sid: str) -> bool:
        return self.store.get_player(room_code, sid) is not None

    @staticmethod
    def grace_key(player_id: str):
        return ('grace', player_id)

    @staticmethod
    def kick_key(sid: str):
        return ('kick', sid)

    # ---- client actions ----

    def join(self, sid: str, data) -> dict:
        data = data or {}
        room_code = _text(data, 'roomCode')
        name = _text(data, 'playerName')
        if not room_code or not name:
            return {
                'success': False,
                'error': 'roomCode and playerName are required',
                'code': 'invalid_request',
            }
        is_moderator = data.get('isModerator') is True
        reconnect_id = _text(data, 'reconnectPlayerId')

        with self.store.lock:
            joined_room = self.connections.get(sid)
            if joined_room not in (None, room_code) and self._is_member(joined_room, sid):
                return {
                    'success': False,
                    'error': f'Already joined room {joined_room}',
                    'code': 'already_joined',
                }

            # Same connection joining again: resend state, tell nobody
            player = self.store.get_player(room_code, sid)
            silent = player is not None
            if player is None and reconnect_id and reconnect_id != sid:
                previous = self.store.get_player(room_code, reconnect_id)
                if previous is not None and previous.name.casefold() == name.casefold():
                    self.deferred.cancel(self.grace_key(reconnect_id))
                    player = self.players.reconnect_player(room_code, reconnect_id, sid)
                    if player is not None:
                        silent = True
                        # The old transport may still be open if the join won the race
                        self.connections.pop(reconnect_id, None)
                        self.socketio.server.leave_room(reconnect_id, room_code, namespace=self.namespace)

            if player is None:
                result = self.players.add_player(room_code, sid, name, is_moderator=is_moderator)
                if not result.success:
                    self.logger.debug(f"[join-reject] room={room_code} name={name!r} reason={result.error.value}")
                    return {'success': False, 'error': result.message, 'code': result.error.value}
                player = result.player

            self.socketio.server.enter_room(sid, room_code, namespace=self.namespace)
            self.connections[sid] = room_code
            # A connection removed a moment ago that joins again is no longer kicked
            self.deferred.cancel(self.kick_key(sid))

            room = self.store.get(room_code)
            self._emit(payloads.ROOM_STATE, payloads.room_state_payload(room, sid), to=sid)
            if not silent:
                self._emit(payloads.PLAYER_JOINED, payloads.player_joined_payload(player),
                           to=room_code, skip_sid=sid)

        return {'success': True, 'playerId': sid}

    def select_card(self, sid: str, data) -> None:
        data = data or {}
        room_code = _text(data, 'roomCode')
        card = data.get('card')
        if not room_code:
            self._error(sid, 'roomCode is required', 'invalid_request')
            return
        if card is not None and not is_card_value(card):
            self._error(sid, f'Invalid card value: {card!r}', 'invalid_card')
            return

        with self.store.lock:
            player = self.store.get_player(room_code, sid)
            if player is None:
                self._error(sid, 'You are not a player in this room', 'not_found')
                return
            if player.is_moderator:
                return
            if self.store.get(room_code).is_revealed:
                self.logger.debug(f"[card-ignored] room={room_code} player={sid} room is revealed")
                return
            if not self.players.update_card(room_code, sid, card):
                self._error(sid, 'You are not a player in this room', 'not_found')
                return

            for_self, for_others = payloads.card_selected_payloads(player)
            self._emit(payloads.CARD_SELECTED, for_self, to=sid)
            self._emit(payloads.CARD_SELECTED, for_others, to=room_code, skip_sid=sid)

    def reveal_cards(self, sid: str, data) -> None:
        room_code = _text(data or {}, 'roomCode')
        if not room_code:
            self._error(sid, 'roomCode is required', 'invalid_request')
            return
        with self.store.lock:
            if not self._is_member(room_code, sid):
                return
            if not self.game.can_reveal(room_code):
                self.logger.debug(f"[reveal-ignored] room={room_code} quorum not met")
                return
            players = self.game.reveal(room_code)
            if players is None:
                return
            self._emit(payloads.CARDS_REVEALED, payloads.cards_revealed_payload(players), to=room_code)

    def reset_game(self, sid: str, data) -> None:
        room_code = _text(data or {}, 'roomCode')
        if not room_code:
            self._error(sid, 'roomCode is required', 'invalid_request')
            return
        with self.store.lock:
            if not self._is_member(room_code, sid):
                return
            players = self.game.reset(room_code)
            if players is None:
                return
            self._emit(payloads.GAME_RESET, payloads.game_reset_payload(players), to=room_code)

    def remove_player(self, sid: str, data) -> None:
        data = data or {}
        room_code = _text(data, 'roomCode')
        target_id = _text(data, 'playerId')
        if not room_code or not target_id:
            self._error(sid, 'roomCode and playerId are required', 'invalid_request')
            return

        with self.store.lock:
            if not self._is_member(room_code, sid):
                return
            target = self.store.get_player(room_code, target_id)
            if target is None:
                return
            self.players.remove_player(room_code, target_id)
            self.deferred.cancel(self.grace_key(target_id))

            if target_id in self.connections:
                self._emit(payloads.REMOVED_FROM_ROOM,
                           payloads.removed_from_room_payload(room_code, sid, target_id),
                           to=target_id)
                self.socketio.server.leave_room(target_id, room_code, namespace=self.namespace)
                self.deferred.schedule(self.kick_key(target_id), self.removal_delay_sec,
                                       partial(self._close_connection, room_code, target_id))

            self._emit(payloads.PLAYER_LEFT, payloads.player_left_payload(target.id, target.name),
                       to=room_code, skip_sid=target_id)

    # ---- transport events ----

    def disconnect(self, sid: str) -> None:
        """Start the grace period for the player behind a closed transport."""
        with self.store.lock:
            room_code = self.connections.pop(sid, None)
            if room_code is None:
                return
            player = self.store.get_player(room_code, sid)
            if player is None:
                return
            self.deferred.schedule(self.grace_key(sid), self.grace_period_sec,
                                   partial(self._expire_grace, room_code, sid))
            self.logger.debug(
                f"[grace-set] room={room_code} player={sid} name={player.name!r} period={self.grace_period_sec}s"
            )

    def _expire_grace(self, room_code: str, player_id: str) -> None:
        with self.store.lock:
            player = self.store.get_player(room_code, player_id)
            if player is None:
                return
            self.players.remove_player(room_code, player_id)
            self.logger.info(f"[grace-fire] room={room_code} player={player_id} removed after grace period")
            self._emit(payloads.PLAYER_LEFT, payloads.player_left_payload(player.id, player.name), to=room_code)

    def _close_connection(self, room_code: str, sid: str) -> None:
        with self.store.lock:
            # Forget the connection first so its disconnect starts no grace period
            if self.connections.get(sid) == room_code:
                del self.connections[sid]
        self.socketio.server.disconnect(sid, namespace=self.namespace)
