from dataclasses import dataclass
from enum import Enum
from typing import Optional

from scrumpoker.models import Player
from .store import RoomStore


class JoinError(str, Enum):
    ROOM_FULL = 'room_full'
    NAME_TAKEN = 'name_taken'


@dataclass
class AddPlayerResult:
    success: bool
    player: Optional[Player] = None
    error: Optional[JoinError] = None
    message: Optional[str] = None


class PlayerLifecycle:
    """Adds, removes, re-keys and updates players inside the room store."""

    def __init__(self, store: RoomStore, max_players: int = 20):
        self.store = store
        self.max_players = max_players

    def add_player(self, room_code: str, player_id: str, name: str, is_moderator: bool = False) -> AddPlayerResult:
        with self.store.lock:
            room = self.store.create_or_get(room_code)

            if len(room.players) >= self.max_players:
                return AddPlayerResult(
                    success=False,
                    error=JoinError.ROOM_FULL,
                    message=f'Room is full (maximum {self.max_players} players)',
                )

            wanted = name.casefold()
            if any(p.name.casefold() == wanted for p in room.players.values()):
                return AddPlayerResult(
                    success=False,
                    error=JoinError.NAME_TAKEN,
                    message='Player name already taken in this room',
                )

            player = Player(
                id=player_id,
                name=name,
                joined_at=self.store.clock(),
                is_moderator=is_moderator,
            )
            room.players[player_id] = player
            self.store.touch(room)
            self.store.logger.info(
                f"[join] room={room_code} player={player_id} name={name!r} moderator={is_moderator}"
            )
            return AddPlayerResult(success=True, player=player)

    def remove_player(self, room_code: str, player_id: str) -> bool:
        with self.store.lock:
            room = self.store.get(room_code)
            if room is None:
                return False
            player = room.players.pop(player_id, None)
            if player is None:
                return False
            self.store.touch(room)
            self.store.logger.info(f"[leave] room={room_code} player={player_id} name={player.name!r}")
            return True

    def reconnect_player(self, room_code: str, old_id: str, new_id: str) -> Optional[Player]:
        """Move the player stored under ``old_id`` to ``new_id``.

        Name, card, moderator flag and join time are kept; ``old_id`` stops
        resolving. Returns None when ``old_id`` is not a player of the room or
        ``new_id`` already holds a seat there.
        """
        with self.store.lock:
            room = self.store.get(room_code)
            if room is None:
                return None
            if old_id not in room.players or new_id in room.players:
                return None
            player = room.players.pop(old_id)
            player.id = new_id
            room.players[new_id] = player
            self.store.touch(room)
            self.store.logger.info(f"[reconnect] room={room_code} player={old_id} -> {new_id}")
            return player

    def update_card(self, room_code: str, player_id: str, card: Optional[str]) -> bool:
        with self.store.lock:
            room = self.store.get(room_code)
            if room is None:
                return False
            player = room.players.get(player_id)
            if player is None:
                return False
            player.card = card
            self.store.touch(room)
            if card is None:
                self.store.logger.debug(f"[card] room={room_code} player={player_id} unselected")
            else:
                self.store.logger.debug(f"[card] room={room_code} player={player_id} selected")
            return True
