from flask import Flask, current_app
from flask_cors import CORS
from flask_socketio import SocketIO
import random
from config import Config
from cardroom.services.game import Broadcaster, ConnectionDirectory, MessageRouter, RoomRegistry

EXTENSION_KEY = 'cardroom'

socketio = SocketIO(async_mode=None)

def get_router(app=None) -> MessageRouter:
    """Return the MessageRouter built for ``app`` (default: the current app)."""
    app = app or current_app
    return app.extensions[EXTENSION_KEY]

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    allowed_origins = flask_app.config.get('CORS_ALLOWED_ORIGINS') or []
    CORS(flask_app, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # The game services live for the lifetime of this app; nothing is global
    seed = flask_app.config.get('SHUFFLE_SEED')
    rng = random.Random(seed) if seed is not None else random.Random()
    registry = RoomRegistry(rng=rng)
    router = MessageRouter(registry, Broadcaster(ConnectionDirectory()))
    flask_app.extensions[EXTENSION_KEY] = router

    from cardroom.main import main
    flask_app.register_blueprint(main)

    # Register Socket.IO event handlers
    from cardroom.socketio_events import register_socketio_handlers
    namespace = flask_app.config.get('SOCKETIO_NAMESPACE', '/ws')
    register_socketio_handlers(namespace=namespace)
    flask_app.logger.info(f"[startup] namespace={namespace} seeded={seed is not None}")

    return flask_app
