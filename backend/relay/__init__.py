import logging

from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from config import Config
from relay.services.rooms import RoomRegistry

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"

socketio = SocketIO(async_mode=None)


def _allowed_origins(raw):
    if isinstance(raw, (list, tuple)):
        return list(raw)
    raw = (raw or '').strip()
    if raw == '*':
        return '*'
    return [origin.strip() for origin in raw.split(',') if origin.strip()]


def get_registry(flask_app) -> RoomRegistry:
    return flask_app.extensions['room_registry']


def create_app(config_class=Config, registry=None):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    logging.basicConfig(level=flask_app.config.get('LOG_LEVEL', 'INFO'), format=LOG_FORMAT)

    # One registry per application; handlers reach it through the app, not a module global
    if registry is None:
        registry = RoomRegistry(
            id_length=flask_app.config.get('ROOM_ID_LENGTH', 4),
            max_id_attempts=flask_app.config.get('ROOM_ID_MAX_ATTEMPTS', 32),
        )
    flask_app.extensions['room_registry'] = registry

    allowed_origins = _allowed_origins(flask_app.config.get('CORS_ORIGINS', '*'))
    CORS(flask_app, origins=allowed_origins)
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from relay.main import main
    flask_app.register_blueprint(main)

    from relay.api.rooms import rooms
    flask_app.register_blueprint(rooms, url_prefix='/api/rooms')

    from relay.socketio_events import register_socketio_handlers
    register_socketio_handlers(namespace=flask_app.config.get('SOCKETIO_NAMESPACE', '/ws'))

    return flask_app
