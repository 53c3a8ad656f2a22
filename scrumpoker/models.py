from dataclasses import dataclass, field
from typing import Dict, Optional

# Selectable estimation values, in display order
CARD_VALUES = ('1', '2', '3', '5', '8', '13', '20', 'X')

# Sort rank per card; the non-numeric 'X' goes after every numeric value
CARD_ORDER = {
    '1': 1,
    '2': 2,
    '3': 3,
    '5': 5,
    '8': 8,
    '13': 13,
    '20': 20,
    'X': 99,
}

# Rank used for players without a card when ordering a revealed room
NO_CARD_RANK = 999


def is_card_value(value) -> bool:
    return isinstance(value, str) and value in CARD_ORDER


def card_rank(card: Optional[str]) -> int:
    if card is None:
        return NO_CARD_RANK
    return CARD_ORDER[card]


def compare_cards(a: Optional[str], b: Optional[str]) -> int:
    """Compare two card values: numeric ascending, 'X' last, no card after all.

    Returns a negative number, zero or a positive number like a classic cmp().
    """
    return card_rank(a) - card_rank(b)


def name_key(name: str):
    """Alphabetical key close to a locale-aware compare: case folded first,
    then the raw string so 'alice' and 'Alice' still order deterministically."""
    return (name.casefold(), name)


@dataclass
class Player:
    id: str
    name: str
    joined_at: float
    card: Optional[str] = None
    is_moderator: bool = False

    @property
    def has_card(self) -> bool:
        return self.card is not None

    def to_dict(self, show_card: bool = True):
        return {
            'id': self.id,
            'name': self.name,
            'card': self.card if show_card else None,
            'hasCard': self.has_card,
            'isModerator': self.is_moderator,
            'joinedAt': int(self.joined_at * 1000),
        }


@dataclass
class Room:
    code: str
    created_at: float
    last_activity: float
    is_revealed: bool = False
    players: Dict[str, Player] = field(default_factory=dict)

    def voters(self):
        """Players that may hold a card (moderators excluded)."""
        return [p for p in self.players.values() if not p.is_moderator]

    def to_dict(self, viewer_id: Optional[str] = None):
        """Snapshot of the room as seen by ``viewer_id``.

        Until the room is revealed, only the viewer's own card value is
        included; everyone else shows ``hasCard`` only.
        """
        return {
            'roomCode': self.code,
            'players': [
                p.to_dict(show_card=self.is_revealed or p.id == viewer_id)
                for p in self.players.values()
            ],
            'isRevealed': self.is_revealed,
        }
