"""Outgoing event payloads.

Every function here is pure: it turns room/player data into the dict that is
put on the wire. Actions whose audiences see different data return one
payload per audience, so the card privacy rule (no card value leaves the
server before reveal, except to its owner) lives in one place.
"""

from typing import Iterable, Optional, Tuple

from scrumpoker.models import Player, Room

# Server -> client event names
ROOM_STATE = 'room-state'
PLAYER_JOINED = 'player-joined'
PLAYER_LEFT = 'player-left'
CARD_SELECTED = 'card-selected'
CARDS_REVEALED = 'cards-revealed'
GAME_RESET = 'game-reset'
REMOVED_FROM_ROOM = 'removed-from-room'
ERROR = 'error'


def room_state_payload(room: Room, viewer_id: str):
    payload = room.to_dict(viewer_id=viewer_id)
    payload['currentPlayerId'] = viewer_id
    return payload


def player_joined_payload(player: Player):
    return {'player': player.to_dict(show_card=False)}


def player_left_payload(player_id: str, player_name: str):
    return {'playerId': player_id, 'playerName': player_name}


def card_selected_payloads(player: Player) -> Tuple[dict, dict]:
    """Return (payload for the selector, payload for everyone else)."""
    for_others = {'playerId': player.id, 'hasCard': player.has_card}
    for_self = dict(for_others, cardValue=player.card)
    return for_self, for_others


def cards_revealed_payload(players: Iterable[Player]):
    return {'players': [p.to_dict(show_card=True) for p in players]}


def game_reset_payload(players: Iterable[Player]):
    return {'players': [p.to_dict(show_card=True) for p in players]}


def removed_from_room_payload(room_code: str, requester_id: str, target_id: str):
    return {
        'roomCode': room_code,
        'reason': 'self' if requester_id == target_id else 'other',
    }


def error_payload(message: str, code: Optional[str] = None):
    payload = {'message': message}
    if code:
        payload['code'] = code
    return payload
