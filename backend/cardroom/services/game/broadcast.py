import logging
from typing import Callable, Dict, Iterable, Optional

from . import protocol

logger = logging.getLogger(__name__)

SendHandle = Callable[[str], None]


class ConnectionDirectory:
    """Maps opaque connection ids to live send handles.

    Only open connections are registered, so presence here is liveness.
    """

    def __init__(self):
        self._handles: Dict[str, SendHandle] = {}

    def __len__(self):
        return len(self._handles)

    def register(self, connection_id: str, send: SendHandle) -> None:
        self._handles[connection_id] = send

    def unregister(self, connection_id: str) -> None:
        self._handles.pop(connection_id, None)

    def get(self, connection_id: str) -> Optional[SendHandle]:
        return self._handles.get(connection_id)

    def is_open(self, connection_id: str) -> bool:
        return connection_id in self._handles


class Broadcaster:
    """Best-effort, at-most-once delivery of protocol messages."""

    def __init__(self, directory: ConnectionDirectory):
        self.directory = directory

    def send(self, connection_id: str, message) -> bool:
        send = self.directory.get(connection_id)
        if send is None:
            return False
        try:
            send(protocol.encode(message))
        except Exception as exc:
            logger.warning(f"[send-failed] conn={connection_id} type={message.get('type')} error={exc}")
            return False
        return True

    def broadcast(self, room, message) -> None:
        for connection_id in room.connection_ids():
            self.send(connection_id, message)

    def deliver(self, room, outbound: Iterable[protocol.Outbound]) -> None:
        for item in outbound:
            if item.to is None:
                self.broadcast(room, item.message)
            else:
                self.send(item.to, item.message)
