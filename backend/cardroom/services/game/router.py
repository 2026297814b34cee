import logging
import threading
from typing import Any, Dict, Optional

from . import protocol
from .broadcast import Broadcaster
from .errors import GameError, NotYourTurn, ProtocolError, RoomNotFound
from .registry import RoomRegistry

logger = logging.getLogger(__name__)


class MessageRouter:
    """Turns inbound envelopes into Room operations.

    The router only checks envelope shape and fills in defaults from the
    connection's own join; every game rule lives in Room. All entry points
    share one lock, so each message runs to completion before the next one
    starts, whichever transport thread delivered it.
    """

    def __init__(self, registry: RoomRegistry, broadcaster: Broadcaster):
        self.registry = registry
        self.broadcaster = broadcaster
        self.lock = threading.RLock()
        # connection id -> {'room': ..., 'player_id': ..., 'nick': ...}
        self._sessions: Dict[str, Dict[str, Any]] = {}
        self._handlers = {
            protocol.MSG_JOIN: self._on_join,
            protocol.MSG_CHAT: self._on_chat,
            protocol.MSG_DRAW: self._on_draw,
            protocol.MSG_DISCARD: self._on_discard,
        }

    @property
    def directory(self):
        return self.broadcaster.directory

    def session(self, connection_id) -> Dict[str, Any]:
        return self._sessions.setdefault(connection_id, {})

    # ---- Transport entry points ----

    def connect(self, connection_id: str, send) -> None:
        with self.lock:
            self.directory.register(connection_id, send)
            self._sessions[connection_id] = {}
        logger.debug(f"[connect] conn={connection_id}")

    def handle(self, connection_id: str, raw) -> None:
        with self.lock:
            try:
                message_type, payload = protocol.parse(raw)
                handler = self._handlers.get(message_type) if isinstance(message_type, str) else None
                if handler is None:
                    raise ProtocolError(f"Unknown message type: {message_type}")
                handler(connection_id, payload)
            except GameError as exc:
                logger.info(f"[rejected] conn={connection_id} error={type(exc).__name__} message={exc.message}")
                self.broadcaster.send(connection_id, protocol.error(exc.message))

    def disconnect(self, connection_id: str) -> None:
        with self.lock:
            ctx = self._sessions.pop(connection_id, None) or {}
            self.directory.unregister(connection_id)
            room_id = ctx.get('room')
            if room_id is None or room_id not in self.registry:
                return
            room = self.registry.get(room_id)
            outbound = room.leave(ctx.get('player_id'))
            if room.is_empty:
                self.registry.remove(room_id)
            else:
                self.broadcaster.deliver(room, outbound)
        logger.debug(f"[disconnect] conn={connection_id} room={room_id}")

    def snapshot(self, room_id: Optional[str] = None):
        """Public room summaries for the status endpoints."""
        with self.lock:
            if room_id is None:
                return self.registry.snapshot()
            return self.registry.get(room_id).summary()

    # ---- Handlers ----

    def _room_for(self, connection_id, payload):
        room_id = payload.get('room') or self.session(connection_id).get('room')
        if not room_id:
            raise RoomNotFound()
        if not isinstance(room_id, str):
            raise ProtocolError('Room ID must be a string')
        return self.registry.get(room_id)

    def _on_join(self, connection_id, payload):
        room_id = payload.get('room')
        if not room_id or not isinstance(room_id, str):
            raise ProtocolError('Room ID is required')
        ctx = self.session(connection_id)
        if ctx.get('room'):
            raise ProtocolError(f"Already joined room {ctx['room']}")
        nick = payload.get('nick') or protocol.DEFAULT_NICK
        allow_create = bool(payload.get('create'))

        room = self.registry.create_or_get(room_id, allow_create)
        player, outbound = room.join(nick, connection_id)
        ctx.update(room=room.id, player_id=player.id, nick=nick)
        self.broadcaster.deliver(room, outbound)

    def _on_chat(self, connection_id, payload):
        room = self._room_for(connection_id, payload)
        ctx = self.session(connection_id)
        nick = payload.get('nick') or ctx.get('nick') or protocol.DEFAULT_NICK
        text = payload.get('text') or ''
        self.broadcaster.deliver(room, room.chat(nick, text, ctx.get('player_id')))

    def _acting_player(self, connection_id, payload):
        # A connection only ever acts as the player it joined as
        own_id = self.session(connection_id).get('player_id')
        claimed = payload.get('playerId')
        if own_id is None or (claimed is not None and claimed != own_id):
            raise NotYourTurn()
        return own_id

    def _on_draw(self, connection_id, payload):
        room = self._room_for(connection_id, payload)
        player_id = self._acting_player(connection_id, payload)
        self.broadcaster.deliver(room, room.draw(player_id))

    def _on_discard(self, connection_id, payload):
        room = self._room_for(connection_id, payload)
        player_id = self._acting_player(connection_id, payload)
        self.broadcaster.deliver(room, room.discard(player_id, payload.get('cardIndex')))
