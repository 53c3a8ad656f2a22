import logging
import math
import threading
import time
from typing import Callable, Dict, List, Optional

from scrumpoker.models import CARD_VALUES, Player, Room


class RoomStore:
    """Authoritative in-memory map of room code -> Room.

    One instance is created per application and handed to every component
    that needs it. ``lock`` is re-entrant; callers that chain several store
    operations into one logical action hold it for the whole sequence.
    """

    def __init__(self, clock: Callable[[], float] = time.time, logger: Optional[logging.Logger] = None):
        self.clock = clock
        self.logger = logger or logging.getLogger(__name__)
        self.lock = threading.RLock()
        self._rooms: Dict[str, Room] = {}

    def touch(self, room: Room) -> None:
        room.last_activity = self.clock()

    def create_or_get(self, room_code: str) -> Room:
        with self.lock:
            room = self._rooms.get(room_code)
            if room is None:
                now = self.clock()
                room = Room(code=room_code, created_at=now, last_activity=now)
                self._rooms[room_code] = room
                self.logger.info(f"[room-create] room={room_code}")
            return room

    def get(self, room_code: str) -> Optional[Room]:
        return self._rooms.get(room_code)

    def exists(self, room_code: str) -> bool:
        return room_code in self._rooms

    def get_player(self, room_code: str, player_id: str) -> Optional[Player]:
        room = self._rooms.get(room_code)
        if room is None:
            return None
        return room.players.get(player_id)

    def get_room_players(self, room_code: str) -> List[Player]:
        room = self._rooms.get(room_code)
        return list(room.players.values()) if room else []

    def get_room_state(self, room_code: str, viewer_id: Optional[str] = None):
        room = self._rooms.get(room_code)
        if room is None:
            return None
        return room.to_dict(viewer_id=viewer_id)

    def set_revealed(self, room_code: str, revealed: bool) -> bool:
        with self.lock:
            room = self._rooms.get(room_code)
            if room is None:
                return False
            room.is_revealed = revealed
            self.touch(room)
            return True

    def clear_all_cards(self, room_code: str) -> bool:
        with self.lock:
            room = self._rooms.get(room_code)
            if room is None:
                return False
            for player in room.players.values():
                player.card = None
            room.is_revealed = False
            self.touch(room)
            return True

    def active_room_count(self) -> int:
        return len(self._rooms)

    def cleanup(self, now: Optional[float] = None, threshold_sec: float = 30 * 60) -> int:
        """Delete empty rooms idle for longer than ``threshold_sec``.

        Scan and delete happen under the store lock, so a join cannot slip in
        between the emptiness check and the deletion.
        """
        with self.lock:
            if now is None:
                now = self.clock()
            stale = [
                code for code, room in self._rooms.items()
                if not room.players and now - room.last_activity > threshold_sec
            ]
            for code in stale:
                del self._rooms[code]
                self.logger.info(f"[cleanup] removed stale room={code}")
            return len(stale)

    def admin_stats(self):
        """Read-only aggregate over every room, used by the admin endpoint."""
        with self.lock:
            total_players = 0
            with_cards = 0
            without_cards = 0
            empty_rooms = 0
            rooms_with_players = 0
            revealed_rooms = 0
            distribution = {card: 0 for card in CARD_VALUES}

            for room in self._rooms.values():
                count = len(room.players)
                total_players += count
                if count == 0:
                    empty_rooms += 1
                else:
                    rooms_with_players += 1
                if room.is_revealed:
                    revealed_rooms += 1
                for player in room.players.values():
                    if player.card is not None:
                        with_cards += 1
                        distribution[player.card] += 1
                    else:
                        without_cards += 1

            total_rooms = len(self._rooms)
            average = total_players / total_rooms if total_rooms else 0
            return {
                'timestamp': int(self.clock() * 1000),
                'rooms': {
                    'total': total_rooms,
                    'empty': empty_rooms,
                    'withPlayers': rooms_with_players,
                    'revealed': revealed_rooms,
                    'hidden': total_rooms - revealed_rooms,
                },
                'players': {
                    'total': total_players,
                    'averagePerRoom': math.floor(average * 100 + 0.5) / 100,
                    'withCards': with_cards,
                    'withoutCards': without_cards,
                },
                'cards': {
                    'distribution': distribution,
                },
            }
