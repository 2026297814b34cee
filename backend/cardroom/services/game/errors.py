"""Client-recoverable game errors.

Each error is reported back to the connection that caused it as an
``error`` message; none of them closes the connection.
"""


class GameError(Exception):
    default_message = 'Game error'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ProtocolError(GameError):
    """Malformed envelope, missing field or unknown message type."""
    default_message = 'Invalid message'


class RoomNotFound(GameError):
    default_message = 'Room not found (join with create=true to open it)'


class RoomFull(GameError):
    default_message = 'Room is full'


class NotYourTurn(GameError):
    default_message = 'It is not your turn'


class DeckEmpty(GameError):
    default_message = 'The deck is empty'


class InvalidCardIndex(GameError):
    default_message = 'Invalid card index'
