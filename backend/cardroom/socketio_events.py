from flask import request
from cardroom import get_router, socketio


def handle_connect(auth=None):
    sid = _get_sid()
    get_router().connect(sid, _make_sender(sid, request.namespace))


def handle_disconnect(reason=None):
    # Leaves the joined room, if any, and forgets the connection
    get_router().disconnect(_get_sid())


def handle_message(data):
    """Every protocol envelope arrives as a plain Socket.IO ``message``."""
    get_router().handle(_get_sid(), data)


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _make_sender(sid: str, namespace: str):
    def _send(text: str) -> None:
        socketio.send(text, to=sid, namespace=namespace)
    return _send


def register_socketio_handlers(namespace: str = '/ws') -> None:
    """Register the card room handlers on ``namespace``."""
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event('message', handle_message, namespace=namespace)
