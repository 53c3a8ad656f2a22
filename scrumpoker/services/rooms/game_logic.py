from typing import List, Optional

from scrumpoker.models import Player, card_rank, name_key
from .store import RoomStore

# Minimum number of carded players before a reveal is allowed
REVEAL_QUORUM = 2


def reveal_order(players: List[Player]) -> List[Player]:
    """Card ascending ('X' after numbers, no card last), then name."""
    return sorted(players, key=lambda p: (card_rank(p.card), name_key(p.name)))


def alphabetical_order(players: List[Player]) -> List[Player]:
    return sorted(players, key=lambda p: name_key(p.name))


class GameLogic:
    """Reveal/reset transitions for a room: Hidden <-> Revealed."""

    def __init__(self, store: RoomStore):
        self.store = store

    def sorted_players(self, room_code: str) -> List[Player]:
        room = self.store.get(room_code)
        if room is None:
            return []
        players = list(room.players.values())
        if room.is_revealed:
            return reveal_order(players)
        return alphabetical_order(players)

    def reveal(self, room_code: str) -> Optional[List[Player]]:
        """Mark the room revealed and return its players in reveal order.

        Returns None when the room does not exist.
        """
        with self.store.lock:
            if not self.store.set_revealed(room_code, True):
                return None
            self.store.logger.debug(f"[reveal] room={room_code}")
            return self.sorted_players(room_code)

    def reset(self, room_code: str) -> Optional[List[Player]]:
        """Clear every card, hide the room and return players alphabetically."""
        with self.store.lock:
            if not self.store.clear_all_cards(room_code):
                return None
            self.store.logger.debug(f"[reset] room={room_code}")
            return self.sorted_players(room_code)

    def can_reveal(self, room_code: str) -> bool:
        room = self.store.get(room_code)
        if room is None:
            return False
        voters = room.voters()
        if len(voters) < REVEAL_QUORUM:
            return False
        return sum(1 for p in voters if p.has_card) >= REVEAL_QUORUM

    def can_reset(self, room_code: str) -> bool:
        room = self.store.get(room_code)
        return bool(room and room.is_revealed)

    def stats(self, room_code: str):
        room = self.store.get(room_code)
        if room is None:
            return None
        voters = room.voters()
        with_cards = sum(1 for p in voters if p.has_card)
        return {
            'totalPlayers': len(voters),
            'withCards': with_cards,
            'withoutCards': len(voters) - with_cards,
            'isRevealed': room.is_revealed,
            'canReveal': self.can_reveal(room_code),
            'canReset': self.can_reset(room_code),
        }
