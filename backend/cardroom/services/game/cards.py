from dataclasses import dataclass
import random
from typing import List

from .errors import DeckEmpty

SUITS = ('♥', '♦', '♣', '♠')
RANKS = ('2', '3', '4', '5', '6', '7', '8', '9', '10', 'J', 'Q', 'K', 'A')
RED_SUITS = frozenset(('♥', '♦'))


@dataclass(frozen=True)
class Card:
    suit: str
    rank: str

    @property
    def color(self) -> str:
        return 'red' if self.suit in RED_SUITS else 'black'

    def to_dict(self):
        # Clients know the rank as "value"
        return {
            'suit': self.suit,
            'value': self.rank,
            'color': self.color,
        }


def create_deck() -> List[Card]:
    """Return a fresh, ordered 52-card deck (one card per suit/rank pair)."""
    return [Card(suit, rank) for suit in SUITS for rank in RANKS]


def shuffle(deck: List[Card], rng=None) -> List[Card]:
    """Shuffle ``deck`` in place with Fisher-Yates, walking from the end.

    ``rng`` only needs a ``randrange`` method; tests pass a scripted source
    to get exact deals. Returns the same list for convenience.
    """
    rng = rng or random
    for i in range(len(deck) - 1, 0, -1):
        j = rng.randrange(i + 1)
        deck[i], deck[j] = deck[j], deck[i]
    return deck


def deal_one(deck: List[Card]) -> Card:
    """Remove and return the top card (the end of the list)."""
    if not deck:
        raise DeckEmpty()
    return deck.pop()
