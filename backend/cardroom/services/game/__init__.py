"""Card room domain services: deck, rooms, registry and message routing.

Everything in this package is transport-agnostic. Socket handlers and HTTP
views import from here; nothing here imports Flask.
"""

from .broadcast import Broadcaster, ConnectionDirectory
from .cards import Card, create_deck, deal_one, shuffle
from .errors import (
    DeckEmpty,
    GameError,
    InvalidCardIndex,
    NotYourTurn,
    ProtocolError,
    RoomFull,
    RoomNotFound,
)
from .registry import RoomRegistry
from .room import Phase, Player, Room
from .router import MessageRouter

__all__ = [
    'Broadcaster',
    'Card',
    'ConnectionDirectory',
    'DeckEmpty',
    'GameError',
    'InvalidCardIndex',
    'MessageRouter',
    'NotYourTurn',
    'Phase',
    'Player',
    'ProtocolError',
    'Room',
    'RoomFull',
    'RoomNotFound',
    'RoomRegistry',
    'create_deck',
    'deal_one',
    'shuffle',
]
