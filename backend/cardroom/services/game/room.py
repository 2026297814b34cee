from dataclasses import dataclass, field
from enum import Enum
import logging
import random
from typing import Callable, List, Optional
import uuid

from . import protocol
from .cards import Card, create_deck, deal_one, shuffle
from .errors import InvalidCardIndex, NotYourTurn, RoomFull
from .protocol import Outbound

logger = logging.getLogger(__name__)

MAX_PLAYERS = 2
HAND_SIZE = 13


class Phase(str, Enum):
    WAITING_FOR_PLAYERS = 'waiting_for_players'
    DEALING = 'dealing'
    TURN = 'turn'
    GAME_OVER = 'game_over'


def new_player_id() -> str:
    return uuid.uuid4().hex[:12]


@dataclass
class Player:
    id: str
    display_name: str
    # Key into the ConnectionDirectory, never the connection itself
    connection_id: str
    hand: List[Card] = field(default_factory=list)


class Room:
    """One two-player game session and its turn state machine.

    Every operation either raises a GameError before touching any state, or
    mutates the room and returns the list of Outbound messages to deliver,
    in order.
    """

    def __init__(self, room_id: str, rng=None, id_factory: Callable[[], str] = new_player_id):
        self.id = room_id
        self.rng = rng or random.Random()
        self.id_factory = id_factory
        self.players: List[Player] = []
        self.deck: List[Card] = []
        self.discard_pile: List[Card] = []
        self.phase = Phase.WAITING_FOR_PLAYERS
        self.current_turn_player_id: Optional[str] = None

    def __repr__(self):
        return f"<Room {self.id} phase={self.phase.value} players={len(self.players)}>"

    @property
    def is_empty(self) -> bool:
        return not self.players

    @property
    def opponent_count(self) -> int:
        return max(0, len(self.players) - 1)

    def find_player(self, player_id) -> Optional[Player]:
        for p in self.players:
            if p.id == player_id:
                return p
        return None

    def opponent_of(self, player_id) -> Optional[Player]:
        for p in self.players:
            if p.id != player_id:
                return p
        return None

    def connection_ids(self) -> List[str]:
        return [p.connection_id for p in self.players]

    # ---- Transitions ----

    def join(self, display_name: str, connection_id: str):
        if len(self.players) >= MAX_PLAYERS:
            raise RoomFull()
        if self.phase != Phase.WAITING_FOR_PLAYERS:
            raise RoomFull('Room is closed: the game has already started')

        player = Player(id=self.id_factory(), display_name=display_name, connection_id=connection_id)
        self.players.append(player)
        logger.info(f"[join] room={self.id} player={player.id} nick={display_name} players={len(self.players)}")

        out = [
            Outbound(protocol.joined(self.id, player.id), to=connection_id),
            Outbound(protocol.system_chat(f"{display_name} joined the room")),
        ]
        if len(self.players) == MAX_PLAYERS:
            out.extend(self._deal())
        else:
            out.append(Outbound(protocol.state(opponentCount=self.opponent_count), to=connection_id))
        return player, out

    def _deal(self):
        self.phase = Phase.DEALING
        self.deck = shuffle(create_deck(), self.rng)
        self.discard_pile = []
        for p in self.players:
            p.hand = [deal_one(self.deck) for _ in range(HAND_SIZE)]
        self.discard_pile.append(deal_one(self.deck))

        starter = self.players[self.rng.randrange(len(self.players))]
        self.current_turn_player_id = starter.id
        self.phase = Phase.TURN
        logger.info(f"[deal] room={self.id} starter={starter.id} deck={len(self.deck)}")

        out = [
            Outbound(
                protocol.start(p.hand, self.opponent_count, p.id == starter.id, self.discard_pile),
                to=p.connection_id,
            )
            for p in self.players
        ]
        out.append(Outbound(protocol.system_chat('Game started')))
        return out

    def _require_turn(self, player_id) -> Player:
        if self.phase == Phase.GAME_OVER:
            raise NotYourTurn('The game is over')
        if self.phase != Phase.TURN:
            raise NotYourTurn()
        owner_id = self.current_turn_player_id
        if owner_id is None and self.players:
            # Nobody holds the turn: it falls to the first-joined player
            owner_id = self.players[0].id
        player = self.find_player(player_id)
        if player is None or player.id != owner_id:
            raise NotYourTurn()
        return player

    def draw(self, player_id):
        player = self._require_turn(player_id)
        card = deal_one(self.deck)
        player.hand.append(card)
        self.current_turn_player_id = player.id
        logger.info(f"[draw] room={self.id} player={player.id} hand={len(player.hand)} deck={len(self.deck)}")
        return [
            Outbound(protocol.deal(player.id, card, self.discard_pile)),
            Outbound(protocol.state(
                opponentCount=self.opponent_count,
                discardPile=protocol.cards_to_list(self.discard_pile),
                isTurn=self.current_turn_player_id,
            )),
        ]

    def discard(self, player_id, hand_index):
        player = self._require_turn(player_id)
        index = _coerce_index(hand_index)
        if index is None or not 0 <= index < len(player.hand):
            raise InvalidCardIndex()

        card = player.hand.pop(index)
        self.discard_pile.append(card)
        other = self.opponent_of(player.id)
        self.current_turn_player_id = other.id if other else None
        logger.info(f"[discard] room={self.id} player={player.id} hand={len(player.hand)} next={self.current_turn_player_id}")

        out = [
            Outbound(protocol.discard(card, player.hand, player.id, self.current_turn_player_id, self.discard_pile)),
            Outbound(protocol.state(
                isTurn=self.current_turn_player_id,
                discardPile=protocol.cards_to_list(self.discard_pile),
            )),
        ]
        if not player.hand:
            self.phase = Phase.GAME_OVER
            logger.info(f"[game_over] room={self.id} winner={player.id}")
            out.append(Outbound(protocol.system_chat(f"{player.display_name} wins!")))
        return out

    def chat(self, nick: str, text: str, sender: Optional[str] = None):
        return [Outbound(protocol.chat(nick, text, sender))]

    def leave(self, player_id):
        """Remove a player. No win is awarded to whoever remains.

        The leaver's hand goes with them, so after a mid-game leave the deck,
        discard pile and remaining hand no longer add up to 52 cards.
        """
        player = self.find_player(player_id)
        if player is None:
            return []
        self.players.remove(player)
        if self.current_turn_player_id == player.id:
            self.current_turn_player_id = self.players[0].id if self.players else None
        logger.info(f"[leave] room={self.id} player={player.id} remaining={len(self.players)}")
        if not self.players:
            return []
        return [
            Outbound(protocol.system_chat(f"{player.display_name} disconnected")),
            Outbound(protocol.state(opponentCount=self.opponent_count)),
        ]

    def summary(self):
        return {
            'room': self.id,
            'phase': self.phase.value,
            'players': [
                {'id': p.id, 'nick': p.display_name, 'handCount': len(p.hand)}
                for p in self.players
            ],
            'deckCount': len(self.deck),
            'discardPile': protocol.cards_to_list(self.discard_pile),
            'currentTurn': self.current_turn_player_id,
        }


def _coerce_index(value) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None
