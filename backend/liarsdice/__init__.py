from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from liarsdice.config import Config

socketio = SocketIO(async_mode=None)


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    allowed_origins = flask_app.config.get('CORS_ORIGINS') or '*'
    if allowed_origins == ['*']:
        allowed_origins = '*'

    CORS(flask_app, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # Import and register blueprints here
    from liarsdice.main import main
    flask_app.register_blueprint(main)

    from liarsdice.api.rooms import rooms
    flask_app.register_blueprint(rooms, url_prefix='/api/rooms')

    # One registry per application; the gateway is the only socket-facing owner
    from liarsdice.services.games.engine import RoundEngine
    from liarsdice.services.games.registry import RoomRegistry
    from liarsdice.services.games.scheduler import RoomScheduler
    from liarsdice.socketio_events import SessionGateway, register_socketio_handlers

    registry = RoomRegistry()
    engine = RoundEngine(
        starting_dice=flask_app.config.get('STARTING_DICE', 4),
        min_players=flask_app.config.get('MIN_PLAYERS', 2),
    )
    scheduler = RoomScheduler(flask_app, socketio, registry)
    namespace = flask_app.config.get('SOCKETIO_NAMESPACE', '/')
    gateway = SessionGateway(socketio, registry, engine, scheduler, flask_app.config, namespace=namespace)
    flask_app.extensions['liarsdice'] = gateway

    register_socketio_handlers(socketio, gateway, namespace=namespace)

    return flask_app
