"""Wire protocol: message tags, envelope parsing and outbound builders.

Every message is ``{"type": <tag>, "payload": <object>}`` encoded as UTF-8
JSON text.
"""

from dataclasses import dataclass
import json
from typing import Any, Dict, Optional, Tuple

from .errors import ProtocolError

# Inbound
MSG_JOIN = 'join'
MSG_CHAT = 'chat'
MSG_DRAW = 'draw'
MSG_DISCARD = 'discard'

# Outbound
MSG_JOINED = 'joined'
MSG_STATE = 'state'
MSG_START = 'start'
MSG_DEAL = 'deal'
MSG_ERROR = 'error'

SYSTEM_NICK = 'System'
DEFAULT_NICK = 'Player'


@dataclass
class Outbound:
    """A message a Room decided to send.

    ``to`` is a connection id for a targeted send, or None for the whole room.
    """
    message: Dict[str, Any]
    to: Optional[str] = None


def envelope(message_type: str, payload: Dict[str, Any]) -> Dict[str, Any]:
    return {'type': message_type, 'payload': payload}


def encode(message: Dict[str, Any]) -> str:
    return json.dumps(message, ensure_ascii=False)


def parse(raw) -> Tuple[Any, Dict[str, Any]]:
    """Decode one inbound envelope into ``(type, payload)``.

    Accepts JSON text/bytes or an already decoded mapping (Socket.IO may hand
    us either). A missing payload is treated as an empty one.
    """
    if isinstance(raw, (bytes, bytearray)):
        try:
            raw = raw.decode('utf-8')
        except UnicodeDecodeError:
            raise ProtocolError('Invalid JSON')
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError:
            raise ProtocolError('Invalid JSON')
    if not isinstance(raw, dict):
        raise ProtocolError('Invalid message envelope')
    payload = raw.get('payload')
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ProtocolError('Invalid message payload')
    return raw.get('type'), payload


def cards_to_list(cards):
    return [c.to_dict() for c in cards]


def joined(room_id: str, player_id: str):
    return envelope(MSG_JOINED, {'room': room_id, 'id': player_id})


def state(**fields):
    return envelope(MSG_STATE, fields)


def start(hand, opponent_count: int, is_turn: bool, discard_pile):
    return envelope(MSG_START, {
        'hand': cards_to_list(hand),
        'opponentCount': opponent_count,
        'isTurn': is_turn,
        'discardPile': cards_to_list(discard_pile),
    })


def deal(to: str, card, discard_pile):
    return envelope(MSG_DEAL, {
        'to': to,
        'card': card.to_dict(),
        'discardPile': cards_to_list(discard_pile),
    })


def discard(card, updated_hand, owner_id: str, next_turn: Optional[str], discard_pile):
    return envelope(MSG_DISCARD, {
        'card': card.to_dict(),
        'updatedHand': cards_to_list(updated_hand),
        'updatedHandOwner': owner_id,
        'nextTurn': next_turn,
        'discardPile': cards_to_list(discard_pile),
    })


def chat(nick: str, text: str, sender: Optional[str] = None):
    payload = {'nick': nick, 'text': text}
    if sender is not None:
        payload['from'] = sender
    return envelope(MSG_CHAT, payload)


def system_chat(text: str):
    return chat(SYSTEM_NICK, text)


def error(message: str):
    return envelope(MSG_ERROR, {'message': message})
